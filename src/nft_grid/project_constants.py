"""
Project-wide immutable parameters for the generative grid NFT.

These values define the public rules of the collection.
Changing them changes every rendering and MUST be publicly announced.
"""

# 1 ether in wei
WEI_PER_ETHER = 10**18

# Mint price: 0.01 ether
MINT_PRICE = WEI_PER_ETHER // 100

# Hard cap on minted tokens
MAX_SUPPLY = 10

# Grid geometry (64 words x 256 bits == 128 x 128 cells)
GRID_ROWS = 128
GRID_COLS = 128
RAW_STATE_WORDS = 64
WORD_BITS = 256

# Cell symbols: bit 1 -> "x", bit 0 -> "o"
ALIVE_CELL = "x"
DEAD_CELL = "o"

UINT256_MAX = 2**256 - 1
