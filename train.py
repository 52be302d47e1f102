"""
Learn a pair of dictionaries 'dgray' and 'dhog' for regressing grayscale
windows from HOG features.
Workflow:
 - Resolve the stream to a list of images
 - Extract aligned gray/HOG windows into one data store
 - Normalize both halves of every column (optionally whitening HOG)
 - Learn one dictionary over the joint vectors (or sample it in fast mode)
 - Split the atoms into dgray and dhog and save them with their metadata
"""

import os
import time

import numpy as np
from sklearn.utils import check_random_state

from config import *
from harvest import check_data_store, data_store_bytes, gray_size, harvest, hog_size
from lasso import LassoDictLearner, RandomDictSampler
from normalize import normalize
from pairdict import PairedDictionary
from report import NullReporter, get_reporter
from utils import makedirs, resolve_stream
from whitening import WhiteningConfig

import argparse


def learn_pair_dict(stream, n=N_SAMPLES, k=DICT_ATOMS, ny=PATCH_NY, nx=PATCH_NX, lam=None, whitening=None,
                    iters=LASSO_ITERS, sbin=SBIN, fast=False, random_state=RANDOM_SEED, n_jobs=N_JOBS,
                    keep_probability=KEEP_PROBABILITY, max_passes=MAX_PASSES, max_bytes=MAX_DATA_BYTES,
                    checkpoint_path=None, reporter=None):
    """
    stream      images: directory, list file, glob or list of paths
    n           number of windows to extract in total
    k           size of the dictionary
    ny, nx      size of the template to invert, in HOG cells
    lam         sparsity weight (default depends on whitening)
    whitening   WhiteningConfig; None means disabled
    iters       lasso iterations
    sbin        HOG bin size
    fast        sample the dictionary from the data instead of learning it
    """
    reporter = get_reporter(reporter)
    whitening = WhiteningConfig.disabled() if whitening is None else whitening
    if lam is None:
        lam = LAMBDA_WHITENED if whitening.enabled else LAMBDA

    reporter.message("train configuration:")
    reporter.message(f"      n = {n}")
    reporter.message(f"      k = {k}")
    reporter.message(f"    dim = {ny}x{nx}")
    reporter.message(f" lambda = {lam:0.3f}")
    reporter.message(f" whiten = {int(whitening.enabled)}")
    reporter.message(f"   fast = {int(fast)}")

    graysize = gray_size(ny, nx, sbin)
    hogsize = hog_size(ny, nx)
    whitening.validate(hogsize)
    reporter.message("projected data store: %.02fGB" % (data_store_bytes(n, (ny, nx), sbin) / 1024 ** 3))
    check_data_store(n, (ny, nx), sbin, max_bytes)

    t = time.time()
    rng = check_random_state(random_state)

    stream = resolve_stream(stream)
    white = whitening.resolve(hogsize, stream=stream, dim=(ny, nx), sbin=sbin, reporter=reporter)
    data, trainims = harvest(stream, n, (ny, nx), sbin, random_state=rng, reporter=reporter,
                             keep_probability=keep_probability, max_passes=max_passes, max_bytes=max_bytes)
    normalize(data, graysize, hogsize, white, reporter=reporter)

    if fast:
        learner = RandomDictSampler(k, random_state=rng, reporter=reporter)
    else:
        learner = LassoDictLearner(k, lam=lam, n_iter=iters, random_state=rng, n_jobs=n_jobs,
                                   checkpoint_path=checkpoint_path, reporter=reporter)
    dictionary = learner.learn(data)

    pd = PairedDictionary.from_dictionary(dictionary, graysize, whitening=white, n=n, k=k, ny=ny, nx=nx,
                                          sbin=sbin, iters=iters, lam=lam, trainims=trainims)
    reporter.message(f"paired dictionaries learned in {time.time() - t:0.3f}s")
    return pd


def whitening_from_args(args):
    if args.auto_whiten:
        return WhiteningConfig.auto_estimate()
    whog = np.load(args.whog) if args.whog else None
    muhog = np.load(args.muhog) if args.muhog else None
    return WhiteningConfig.from_arrays(whog, muhog)


def main(argv=None):
    parser = argparse.ArgumentParser(description="learn paired gray/HOG dictionaries")
    parser.add_argument("stream", help="image directory, list file or glob")
    parser.add_argument("--n", type=int, default=N_SAMPLES, help="number of windows to extract")
    parser.add_argument("--k", type=int, default=DICT_ATOMS, help="dictionary size")
    parser.add_argument("--ny", type=int, default=PATCH_NY)
    parser.add_argument("--nx", type=int, default=PATCH_NX)
    parser.add_argument("--lam", type=float, default=None, help="sparsity weight")
    parser.add_argument("--iters", type=int, default=LASSO_ITERS)
    parser.add_argument("--sbin", type=int, default=SBIN)
    parser.add_argument("--fast", action="store_true", help="sample the dictionary instead of learning it")
    parser.add_argument("--whog", help=".npy whitening matrix for HOG")
    parser.add_argument("--muhog", help=".npy mean vector for HOG")
    parser.add_argument("--auto-whiten", action="store_true", help="estimate the whitening from the stream")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED)
    parser.add_argument("--jobs", type=int, default=N_JOBS)
    parser.add_argument("--checkpoint", default=None, help=".npy file rewritten after every lasso round")
    parser.add_argument("--out", default=os.path.join(OUTPUT_DIR, "pairdict.joblib"))
    parser.add_argument("--quiet", action="store_true")
    args = parser.parse_args(argv)
    if args.auto_whiten and (args.whog or args.muhog):
        parser.error("--auto-whiten cannot be combined with --whog/--muhog")

    reporter = NullReporter() if args.quiet else get_reporter()
    pd = learn_pair_dict(args.stream, n=args.n, k=args.k, ny=args.ny, nx=args.nx, lam=args.lam,
                         whitening=whitening_from_args(args), iters=args.iters, sbin=args.sbin, fast=args.fast,
                         random_state=args.seed, n_jobs=args.jobs, checkpoint_path=args.checkpoint,
                         reporter=reporter)
    out_dir = os.path.dirname(args.out)
    if out_dir:
        makedirs(out_dir)
    pd.save(args.out)
    reporter.message(f"saved paired dictionaries to {args.out}")
    return pd


if __name__ == "__main__":
    main()
