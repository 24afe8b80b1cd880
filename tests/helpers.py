DEPLOYER = "0x" + "d1" * 20
ACCT2 = "0x" + "a2" * 20

# 0xff00 repeated across all 32 bytes
STRIPE_WORD = int("ff00" * 16, 16)


def reference_hash(data: bytes) -> int:
    """Hash reproducing the reference rendering: 1 for input 1, stripes otherwise."""
    return 1 if int.from_bytes(data, "big") == 1 else STRIPE_WORD
