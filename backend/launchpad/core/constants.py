# Native currency is identified by the zero address in commitment tables
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Fixed-point scales (must match the oracle and payment token contracts)
USD_PRICE_DECIMALS = 6
STABLECOIN_DECIMALS = 6
NATIVE_DECIMALS = 18
ORACLE_PRICE_DECIMALS = 8

# Basis for the native discount multiplier (10000 = 100%)
DISCOUNT_BASIS = 10_000
