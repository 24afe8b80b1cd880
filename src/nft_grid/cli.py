from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .config import Settings
from .grid import StaticSeeds, GridGenerator, SeedLookup
from .rpc import RpcClient, RpcSeedSource, load_seeds_from_file
from .verify import compare_onchain, verify_audit, word_hex

from .project_constants import GRID_COLS, GRID_ROWS, RAW_STATE_WORDS, UINT256_MAX


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _open_rpc(args: argparse.Namespace) -> Tuple[RpcClient, str]:
    settings = Settings.from_env(
        rpc_url_override=args.rpc_url, contract_override=args.contract
    )
    return RpcClient(settings.rpc_url, timeout_s=args.timeout), settings.contract_address


def _seed_lookup(args: argparse.Namespace) -> Tuple[SeedLookup, str, Optional[RpcClient]]:
    # Seed source, most specific first
    if args.seed is not None:
        return StaticSeeds({args.token_id: args.seed}), "cli:--seed", None
    if args.seeds_file:
        seeds = load_seeds_from_file(args.seeds_file)
        return StaticSeeds(seeds), f"file:{args.seeds_file}", None
    rpc, contract = _open_rpc(args)
    return RpcSeedSource(rpc, contract), f"rpc:{contract}.seedOf", rpc


def cmd_draw(args: argparse.Namespace) -> int:
    log = logging.getLogger("draw")
    seeds, seed_source, rpc = _seed_lookup(args)
    try:
        seed = seeds.seed_of(args.token_id)
    finally:
        if rpc is not None:
            rpc.close()

    log.info("Token id     : %d", args.token_id)
    log.info("Seed         : %d", seed)
    log.info("Seed source  : %s", seed_source)

    generator = GridGenerator(StaticSeeds({args.token_id: seed}))
    initial_state = generator.get_initial_state(args.token_id)
    rendering = generator.draw(args.token_id)

    print(rendering, end="")

    if args.out:
        audit: Dict[str, Any] = {
            "metadata": {
                "tool": "nft-grid",
                "version": "1.0.0",
                "generated_at_utc": datetime.now(timezone.utc).isoformat(),
                "token_id": args.token_id,
                "seed": str(seed),  # big int; store as string for safety
                "seed_source": seed_source,
                "hash": "keccak256",
                "rows": GRID_ROWS,
                "cols": GRID_COLS,
            },
            "initial_state": [word_hex(w) for w in initial_state],
            "rendering": rendering,
        }
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(audit, f, indent=2)
        log.info("Wrote audit: %s", args.out)
    return 0


def cmd_state(args: argparse.Namespace) -> int:
    seeds, _, rpc = _seed_lookup(args)
    try:
        initial_state = GridGenerator(seeds).get_initial_state(args.token_id)
    finally:
        if rpc is not None:
            rpc.close()

    for idx, word in enumerate(initial_state, start=1):
        print(f"{idx:>2} {word_hex(word)}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("AUDIT VERIFIED")
    print(f"Token id      : {result['token_id']}")
    print(f"Seed          : {result['seed']}")
    print(f"Initial words : {result['words']}/{RAW_STATE_WORDS}")
    print(f"Rows          : {result['rows']}/{GRID_ROWS}")
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    rpc, contract = _open_rpc(args)
    try:
        result = compare_onchain(rpc, contract, args.token_id)
    finally:
        rpc.close()
    print("ON-CHAIN DRAWING MATCHES")
    print(f"Contract      : {contract}")
    print(f"Token id      : {result['token_id']}")
    print(f"Seed          : {result['seed']}")
    return 0


def _uint(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value < 0 or value > UINT256_MAX:
        raise argparse.ArgumentTypeError("must fit in uint256")
    return value


def _add_seed_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--token-id", required=True, type=int, help="Token id to look up.")
    p.add_argument(
        "--seed",
        default=None,
        type=_uint,
        help="Use this seed instead of looking it up (decimal or 0x-hex).",
    )
    p.add_argument(
        "--seeds-file",
        default=None,
        help="JSON file mapping token ids to seeds.",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="nft-grid",
        description="Generative 128x128 grid NFT renderer and verifier.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument(
        "--contract", default=None, help="Override NFT contract address (else use env)."
    )
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    d = sub.add_parser("draw", help="Render a token's grid.")
    _add_seed_args(d)
    d.add_argument("--out", default=None, help="Also write an audit JSON here.")
    d.set_defaults(func=cmd_draw)

    s = sub.add_parser("state", help="Print a token's 64 raw initial-state words.")
    _add_seed_args(s)
    s.set_defaults(func=cmd_state)

    v = sub.add_parser(
        "verify", help="Verify an existing audit JSON deterministically."
    )
    v.add_argument("--audit", required=True, help="Path to audit JSON.")
    v.set_defaults(func=cmd_verify)

    c = sub.add_parser(
        "compare", help="Compare a deployed contract's drawing with the local one."
    )
    c.add_argument("--token-id", required=True, type=int, help="Token id to check.")
    c.set_defaults(func=cmd_compare)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except RuntimeError as e:
        # NFTError and audit/RPC failures
        logging.getLogger("nft-grid").error("%s", e)
        code = 1
    raise SystemExit(code)
