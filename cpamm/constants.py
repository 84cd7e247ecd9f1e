"""Protocol constants for the constant-product pair engine."""

from eth_utils import keccak

# Liquidity permanently locked on the first mint of every pair
MINIMUM_LIQUIDITY = 1000

# Swap fee of 0.3%: amount_in_with_fee = amount_in * (1000 - 3) / 1000
FEE_NUMERATOR = 3
FEE_DENOMINATOR = 1000
FEE_RETENTION = FEE_DENOMINATOR - FEE_NUMERATOR  # = 997

# Void holder of the locked MINIMUM_LIQUIDITY; nothing can transfer out of it
ZERO_ADDRESS = "0x" + "00" * 20

# Registry address used for pair address derivation when none is configured
DEFAULT_REGISTRY_ADDRESS = "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"

# Stand-in for the pair creation code hash in the CREATE2 derivation
PAIR_INIT_CODE_HASH = keccak(text="cpamm.Pair")
