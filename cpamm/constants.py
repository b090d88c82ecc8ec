"""Pool constants.

Centralizes the default fee rate, the first-mint floor and the
integer width used for overflow checks.
"""

# Largest value any counter or intermediate product may take.
# Python ints are unbounded; this keeps the pool within uint256.
UINT256_MAX = 2**256 - 1

# Divisor for the first mint: shares = amount_a * amount_b // SCALE
# Stand-in for a geometric mean (not an exact square root)
SCALE = 1_000_000

# Floor applied to the first mint
MINIMUM_SHARES = 1_000

# Default fee: 3/1000 = 0.3% of each swap's input
FEE_NUMERATOR = 3
FEE_DENOMINATOR = 1_000
