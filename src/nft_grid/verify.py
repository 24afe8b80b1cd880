from __future__ import annotations

import json
from typing import Any, Dict, List

from .grid import check_seed, derive_grid, derive_raw_state, parse_rendering, render
from .rpc import RpcClient


def word_hex(word: int) -> str:
    return "0x" + format(word, "064x")


def _load_audit(audit_path: str) -> Dict[str, Any]:
    try:
        with open(audit_path, "r", encoding="utf-8") as f:
            audit = json.load(f)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Audit is not valid JSON: {e}") from e
    if not isinstance(audit, dict):
        raise RuntimeError("Audit must be a JSON object")
    return audit


def verify_audit(audit_path: str) -> Dict[str, Any]:
    audit = _load_audit(audit_path)

    try:
        meta = audit["metadata"]
        seed = int(meta["seed"])
        token_id = int(meta["token_id"])
        recorded_words: List[str] = [str(w).lower() for w in audit["initial_state"]]
        recorded_rendering = audit["rendering"]
    except KeyError as e:
        raise RuntimeError(f"Audit is missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise RuntimeError(f"Audit field is malformed: {e}") from e

    try:
        check_seed(seed)
        parse_rendering(recorded_rendering)
    except (TypeError, ValueError) as e:
        raise RuntimeError(f"Audit for token {token_id} is malformed: {e}") from e

    if meta.get("hash", "keccak256") != "keccak256":
        raise RuntimeError(f"Unsupported hash in audit: {meta['hash']}")

    raw_state = derive_raw_state(seed)
    expected_words = [word_hex(w) for w in raw_state]
    if recorded_words != expected_words:
        for idx, (got, want) in enumerate(zip(recorded_words, expected_words)):
            if got != want:
                raise RuntimeError(
                    f"Initial state mismatch at word {idx}: audit={got} recomputed={want}"
                )
        raise RuntimeError(
            f"Initial state length mismatch: audit={len(recorded_words)} "
            f"recomputed={len(expected_words)}"
        )

    rendering = render(derive_grid(seed))
    if recorded_rendering != rendering:
        raise RuntimeError(f"Rendering mismatch for token {token_id}")

    return {
        "ok": True,
        "token_id": token_id,
        "seed": seed,
        "words": len(raw_state),
        "rows": rendering.count("\n"),
    }


def compare_onchain(client: RpcClient, contract: str, token_id: int) -> Dict[str, Any]:
    """Check a deployed contract's draw() and getInitialState() against local derivation."""
    seed = client.get_seed(contract, token_id)

    local_state = derive_raw_state(seed)
    chain_state = client.get_initial_state(contract, token_id)
    if chain_state != local_state:
        raise RuntimeError(f"Initial state mismatch for token {token_id}")

    local_rendering = render(derive_grid(seed))
    chain_rendering = client.get_drawing(contract, token_id)
    if chain_rendering != local_rendering:
        raise RuntimeError(f"Rendering mismatch for token {token_id}")

    return {"ok": True, "token_id": token_id, "seed": seed}
