"""
The learned pair of dictionaries and its training metadata.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Tuple

import numpy as np
from joblib import dump, load


@dataclass(frozen=True, eq=False)
class PairedDictionary:
    dgray: np.ndarray            # (graysize, k)
    dhog: np.ndarray             # (hogsize, k)
    n: int
    k: int
    ny: int
    nx: int
    sbin: int
    iters: int
    lam: float
    trainims: Tuple[str, ...]
    whitened: bool = False
    whog: Optional[np.ndarray] = None
    muhog: Optional[np.ndarray] = None

    def __post_init__(self):
        if self.dgray.shape[1] != self.dhog.shape[1]:
            raise ValueError(f"dgray has {self.dgray.shape[1]} atoms but dhog has {self.dhog.shape[1]}")
        if (self.whog is not None, self.muhog is not None) != (self.whitened, self.whitened):
            raise ValueError("whog and muhog must be present exactly when whitened is set")
        object.__setattr__(self, "trainims", tuple(self.trainims))
        for name in ("dgray", "dhog", "whog", "muhog"):
            value = getattr(self, name)
            if value is not None:
                value = np.array(value)
                value.flags.writeable = False
                object.__setattr__(self, name, value)

    @classmethod
    def from_dictionary(cls, dictionary, graysize, whitening=None, **meta):
        """Split a (graysize + hogsize, k) dictionary into its gray and HOG halves."""
        return cls(
            dgray=dictionary[:graysize, :],
            dhog=dictionary[graysize:, :],
            whitened=whitening is not None,
            whog=None if whitening is None else whitening.matrix,
            muhog=None if whitening is None else whitening.mean,
            **meta,
        )

    @property
    def graysize(self):
        return self.dgray.shape[0]

    @property
    def hogsize(self):
        return self.dhog.shape[0]

    def save(self, path):
        dump(asdict(self), path)

    @classmethod
    def load(cls, path):
        return cls(**load(path))
