from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    contract_address: str

    @staticmethod
    def from_env(
        rpc_url_override: str | None = None,
        contract_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        # CLI flags win over the environment.
        rpc_url = rpc_url_override or os.getenv("RPC_URL", "").strip()
        if not rpc_url:
            raise RuntimeError("Missing RPC_URL. Put it in .env or export it.")

        contract = contract_override or os.getenv("NFT_CONTRACT_ADDRESS", "").strip()
        if not contract:
            raise RuntimeError(
                "Missing NFT_CONTRACT_ADDRESS. Put it in .env or pass --contract."
            )

        return Settings(rpc_url=rpc_url, contract_address=contract)
