from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from curate.core.chains import CHAINS, get_chain
from curate.errors import ConfigurationError, UnsupportedChainError


_DEFAULT_SUBGRAPH_IDS: dict[int, str] = {
    1: "A5oqWboEuDezwqpkaJjih4ckGhoHRoXZExqUbja2k1NQ",
    100: "9hHo5MpjpC1JqfD3BsgFnojGurXRHTrHWcUcZPPCo6m8",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    graph_api_key: str | None = Field(
        default=None,
        description="API key for The Graph gateway used to build subgraph URLs",
    )
    graph_gateway_url: str = Field(
        default="https://gateway.thegraph.com/api",
        description="Base URL of The Graph decentralized gateway",
    )
    subgraph_ids: dict[int, str] = Field(
        default_factory=lambda: dict(_DEFAULT_SUBGRAPH_IDS),
        description="Light Curate subgraph deployment id per chain",
    )
    subgraph_urls: dict[int, str] = Field(
        default_factory=dict,
        description="Full subgraph URL overrides per chain (take precedence over subgraph_ids)",
    )
    items_batch_size: int = Field(
        default=1000,
        description="Number of items requested from the subgraph per batch",
        ge=1,
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout applied to subgraph and IPFS requests",
        gt=0,
    )
    ipfs_upload_url: str = Field(
        default=(
            "https://kleros-api.netlify.app/.netlify/functions/upload-to-ipfs"
            "?operation=file&pinToGraph=true"
        ),
        description="Endpoint accepting multipart uploads and returning content identifiers",
    )
    ipfs_gateway_url: str = Field(
        default="https://cdn.kleros.link",
        description="Gateway used to resolve /ipfs/<cid> paths",
    )
    gas_buffer_percent: int = Field(
        default=20,
        description="Safety margin added on top of estimated gas before submitting",
        ge=0,
    )
    rpc_urls: dict[int, str] = Field(
        default_factory=dict,
        description="JSON-RPC endpoint overrides per chain",
    )

    @field_validator("graph_gateway_url", "ipfs_gateway_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("subgraph_urls", "rpc_urls", mode="after")
    @classmethod
    def _drop_blank_urls(cls, value: dict[int, str]) -> dict[int, str]:
        return {chain_id: url.strip() for chain_id, url in value.items() if url and url.strip()}

    @field_validator("graph_api_key", mode="before")
    @classmethod
    def _blank_api_key_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def resolve_subgraph_url(self, chain_id: int) -> str:
        if chain_id not in CHAINS:
            raise UnsupportedChainError(chain_id, CHAINS)
        override = self.subgraph_urls.get(chain_id)
        if override:
            return override
        subgraph_id = self.subgraph_ids.get(chain_id)
        if not subgraph_id:
            raise ConfigurationError(f"No subgraph deployment configured for chain {chain_id}")
        if not self.graph_api_key:
            raise ConfigurationError(
                "GRAPH_API_KEY must be set (or SUBGRAPH_URLS provided) to query the subgraph"
            )
        return f"{self.graph_gateway_url}/{self.graph_api_key}/subgraphs/id/{subgraph_id}"

    def resolve_rpc_url(self, chain_id: int) -> str:
        chain = get_chain(chain_id)
        return self.rpc_urls.get(chain.chain_id) or chain.rpc_url


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
