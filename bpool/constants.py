"""Protocol constants for weighted pools.

All values are 18-decimal fixed-point integers unless noted otherwise.
"""

# Fixed-point unit (1.0)
BONE = 10**18

# Token count bounds (plain integers)
MIN_BOUND_TOKENS = 2
MAX_BOUND_TOKENS = 8

# Denormalized weight bounds
MIN_WEIGHT = BONE
MAX_WEIGHT = BONE * 50
MAX_TOTAL_WEIGHT = BONE * 50

# Smallest balance a token may be bound with (10^-12)
MIN_BALANCE = BONE // 10**12

# Shares minted by finalize()
INIT_POOL_SUPPLY = BONE * 100

# Power function bounds: bpow only accepts bases in (0, 2)
MIN_BPOW_BASE = 1
MAX_BPOW_BASE = (2 * BONE) - 1
BPOW_PRECISION = BONE // 10**10

# Trade size limits relative to the pool balance of the token
MAX_IN_RATIO = BONE // 2
MAX_OUT_RATIO = (BONE // 3) + 1
