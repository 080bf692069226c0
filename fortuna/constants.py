"""Fixed parameters of the Fortuna design."""

NUM_ENTROPY_POOLS = 32

# Bounds on a single request for random data, and on combiner block sizes.
MIN_BLOCK_SIZE = 1
MAX_BLOCK_SIZE = 1 << 20

# Bytes that pool 0 must hold before a reseed is allowed.
RESEED_ENTROPY_THRESHOLD = 64

# Seconds between reseeds.
MIN_RESEED_INTERVAL = 0.1

KEY_ENCODING = "utf-8"

# Largest chunk the accumulator hands to a single pool in one event.
MAX_EVENT_SIZE = 32
