# Global configuration - edit paths and hyperparams here

# Paths
OUTPUT_DIR = "output"                  # where learned paired dictionaries are saved
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".ppm", ".pgm")

# Window sampling
N_SAMPLES = 1000000                    # number of training windows to harvest
DENSE_THRESHOLD = 1000000              # below this, windows are randomly subsampled
KEEP_PROBABILITY = 0.05                # chance a window is kept when subsampling
MAX_PASSES = 1000                      # give up after this many passes over the stream
MAX_DATA_BYTES = 64 * 1024 ** 3        # refuse to allocate a bigger data store (None = no cap)

# Patch geometry
PATCH_NY = 5                           # template height in HOG cells
PATCH_NX = 5                           # template width in HOG cells
SBIN = 8                               # HOG cell size in pixels
HOG_ORIENTATIONS = 9                   # feature dimensions per HOG cell

# Dictionary learning
DICT_ATOMS = 1024
LASSO_ITERS = 1000                     # total minibatch iterations
LASSO_ROUND_ITERS = 100                # iterations per master round (checkpoint interval)
LASSO_BATCH_SIZE = 400
LAMBDA = 0.02                          # sparsity weight on raw HOG
LAMBDA_WHITENED = 0.8                  # sparsity weight on whitened HOG

# Normalization
NORMALIZE_BLOCK_SIZE = 100000          # columns processed at once

# Whitening estimation
WHITEN_SAMPLES = 50000                 # HOG windows used to estimate the covariance
WHITEN_EPS = 1e-3                      # eigenvalue regularizer

# Misc
RANDOM_SEED = 42
N_JOBS = -1                            # for sklearn sparse encoding, -1 uses all cores
