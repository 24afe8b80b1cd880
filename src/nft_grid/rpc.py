from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from eth_abi import decode, encode
from eth_utils import keccak

from .errors import NotFound
from .grid import RawState
from .project_constants import UINT256_MAX

log = logging.getLogger(__name__)


def function_selector(signature: str) -> bytes:
    return keccak(text=signature)[:4]


SEED_OF = "seedOf(uint256)"
DRAW = "draw(uint256)"
GET_INITIAL_STATE = "getInitialState(uint256)"


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)
        self._next_id = 1

    def close(self) -> None:
        self.client.close()

    def _post(self, method: str, params: List[Any]) -> Any:
        """
        Every revert maps to NotFound: seedOf, draw and getInitialState only
        revert for tokens without a recorded seed. Other node errors (out of
        gas, rate limits) carry no revert and raise RuntimeError.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params,
        }
        self._next_id += 1
        try:
            resp = self.client.post(self.rpc_url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise RuntimeError(f"RPC transport error: {e}") from e
        except ValueError as e:
            raise RuntimeError(f"RPC returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RuntimeError(f"RPC returned unexpected payload: {data!r}")
        if "error" in data:
            error = data["error"]
            message = str(error.get("message", "")) if isinstance(error, dict) else str(error)
            if "revert" in message.lower():
                raise NotFound(f"Call reverted: {message}")
            raise RuntimeError(f"RPC error: {error}")
        return data.get("result")

    def eth_call(self, to: str, data: bytes, block: str = "latest") -> bytes:
        result = self._post("eth_call", [{"to": to, "data": "0x" + data.hex()}, block])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise RuntimeError(f"eth_call returned non-hex result: {result!r}")
        return bytes.fromhex(result[2:])

    def _call_token_fn(self, contract: str, signature: str, token_id: int) -> bytes:
        calldata = function_selector(signature) + encode(["uint256"], [token_id])
        log.debug("eth_call %s(%d) on %s", signature.split("(")[0], token_id, contract)
        raw = self.eth_call(contract, calldata)
        if not raw:
            raise NotFound(f"{signature} returned no data for token {token_id}")
        return raw

    def get_seed(self, contract: str, token_id: int) -> int:
        raw = self._call_token_fn(contract, SEED_OF, token_id)
        (seed,) = decode(["uint256"], raw)
        return int(seed)

    def get_drawing(self, contract: str, token_id: int) -> str:
        raw = self._call_token_fn(contract, DRAW, token_id)
        (text,) = decode(["string"], raw)
        return text

    def get_initial_state(self, contract: str, token_id: int) -> RawState:
        raw = self._call_token_fn(contract, GET_INITIAL_STATE, token_id)
        (words,) = decode(["uint256[64]"], raw)
        return tuple(int(w) for w in words)


class RpcSeedSource:
    """SeedLookup backed by a deployed contract's seedOf()."""

    def __init__(self, client: RpcClient, contract: str) -> None:
        self.client = client
        self.contract = contract

    def seed_of(self, token_id: int) -> int:
        return self.client.get_seed(self.contract, token_id)


def load_seeds_from_file(path: str) -> Dict[int, int]:
    """
    Supports JSON of the forms:
    1) {"1": 123, "2": "0xabc"}
    2) {"seeds": {"1": 123}}
    3) [{"token_id": 1, "seed": 123}, ...]
    Seeds may be ints, decimal strings or 0x-prefixed hex strings.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read().strip()

    try:
        j = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Seed file is not valid JSON: {e}") from e

    pairs: List[Tuple[Any, Any]] = []
    if isinstance(j, dict):
        if isinstance(j.get("seeds"), dict):
            j = j["seeds"]
        pairs = list(j.items())
    elif isinstance(j, list):
        for item in j:
            if not isinstance(item, dict) or "token_id" not in item or "seed" not in item:
                raise RuntimeError("Seed list entries need token_id and seed")
            pairs.append((item["token_id"], item["seed"]))
    else:
        raise RuntimeError("Seed file must hold a JSON object or list")

    out: Dict[int, int] = {}
    for token_id, seed in pairs:
        out[int(token_id)] = parse_uint(seed)
    return out


def parse_uint(value: Any) -> int:
    if isinstance(value, bool):
        raise RuntimeError(f"Not an integer: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        try:
            number = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            raise RuntimeError(f"Not an integer: {value!r}") from None
    if number < 0 or number > UINT256_MAX:
        raise RuntimeError(f"Not a uint256: {value!r}")
    return number
