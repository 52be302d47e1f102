"""
Dictionary learners for the paired training data.

Two strategies share the same interface (fit(X) then .D, or learn(X)):
 - LassoDictLearner: L1 sparse-coding dictionary learning,
       min_D,A  1/2 ||X - D A||^2 + lam ||A||_1,  ||d_k|| <= 1
   driven in master rounds of minibatch steps on one warm solver so the
   dictionary can be reported and checkpointed between rounds
 - RandomDictSampler: k random training columns, for debugging/speed
X is (n_features, n_samples): one training vector per column.
"""

import math

import numpy as np
from sklearn.decomposition import MiniBatchDictionaryLearning
from sklearn.utils import check_random_state

from config import (DICT_ATOMS, LAMBDA, LASSO_ITERS, LASSO_ROUND_ITERS, LASSO_BATCH_SIZE,
                    N_JOBS)
from report import get_reporter


class DictionaryLearningStrategy:
    """Base for learners that turn a (n_features, n_samples) matrix into k atoms."""

    def __init__(self, n_atoms=DICT_ATOMS, random_state=None, reporter=None):
        self.n_atoms = n_atoms
        self.random_state = check_random_state(random_state)
        self.reporter = get_reporter(reporter)
        self.D = None

    def fit(self, X):
        raise NotImplementedError

    def learn(self, X):
        """Returns the (n_features, n_atoms) dictionary."""
        return self.fit(X).D


class LassoDictLearner(DictionaryLearningStrategy):
    def __init__(self, n_atoms=DICT_ATOMS, lam=LAMBDA, n_iter=LASSO_ITERS, round_iters=LASSO_ROUND_ITERS,
                 batch_size=LASSO_BATCH_SIZE, random_state=None, n_jobs=N_JOBS, checkpoint_path=None,
                 reporter=None):
        super().__init__(n_atoms, random_state, reporter)
        self.lam = lam
        self.n_iter = n_iter
        self.round_iters = round_iters
        self.batch_size = batch_size
        self.n_jobs = n_jobs
        self.checkpoint_path = checkpoint_path
        self.solver = None
        self.n_steps = 0

    def _initialize_dictionary(self, X):
        # random training columns as the first atoms, unit norm
        n_features, n_samples = X.shape
        idx = self.random_state.choice(n_samples, self.n_atoms, replace=False)
        D = X[:, idx].astype(np.float64)
        D = D / (np.linalg.norm(D, axis=0, keepdims=True) + 1e-12)
        return D

    def _make_solver(self, D):
        return MiniBatchDictionaryLearning(
            n_components=self.n_atoms,
            alpha=self.lam,
            batch_size=self.batch_size,
            fit_algorithm="cd",
            transform_algorithm="lasso_cd",
            transform_alpha=self.lam,
            dict_init=D.T,
            n_jobs=self.n_jobs,
            random_state=self.random_state.randint(np.iinfo(np.int32).max),
        )

    def _step(self, X):
        n_samples = X.shape[1]
        idx = self.random_state.choice(n_samples, min(self.batch_size, n_samples), replace=False)
        self.solver.partial_fit(X[:, idx].T)
        self.n_steps += 1

    def fit(self, X):
        n_features, n_samples = X.shape
        if self.n_atoms > n_samples:
            raise ValueError(f"cannot learn {self.n_atoms} atoms from {n_samples} samples")
        self.reporter.message("lasso")
        self.solver = self._make_solver(self._initialize_dictionary(X))
        self.n_steps = 0
        self.D = None
        for i in range(math.ceil(self.n_iter / self.round_iters)):
            self.reporter.message(f"lasso: master iteration #{i + 1}")
            steps = min(self.round_iters, self.n_iter - self.n_steps)
            for _ in self.reporter.progress(range(steps), desc="Lasso"):
                self._step(X)
            self.D = self.solver.components_.T.copy()
            if self.checkpoint_path is not None:
                np.save(self.checkpoint_path, self.D)
        if self.D is None:
            self.D = self.solver.dict_init.T.copy()
        return self


class RandomDictSampler(DictionaryLearningStrategy):
    """
    Picks k random training columns instead of learning. Mostly useful for
    debugging; a learned dictionary is nearly always better, but this still
    gives surprisingly good reconstructions.
    """

    def fit(self, X):
        n_samples = X.shape[1]
        if self.n_atoms > n_samples:
            raise ValueError(f"cannot sample {self.n_atoms} atoms from {n_samples} samples")
        self.reporter.message(f"sampling {self.n_atoms} random elements for dictionary instead of learning")
        self.indices_ = self.random_state.permutation(n_samples)[:self.n_atoms]
        self.D = X[:, self.indices_]
        return self
