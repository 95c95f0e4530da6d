import sys

from ropewar.cli import main

# https://basescan.org/address/0x432797F45FD2170B4554db426D5be514a6451494
# .env: RPC_URL=..., PRIVATE_KEYS=0xabc...,0xdef...

if __name__ == "__main__":
    sys.exit(main())
