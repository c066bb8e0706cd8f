"""Pydantic models describing Ethereum JSON-RPC payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _parse_quantity(value: int | str) -> int:
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return value


class RpcBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RpcErrorPayload(RpcBaseModel):
    code: int
    message: str
    data: object | None = None


class RpcResponse(RpcBaseModel):
    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: object | None = None
    error: RpcErrorPayload | None = None


class LogPayload(RpcBaseModel):
    address: str
    topics: list[str]
    data: str = "0x"


class ReceiptPayload(RpcBaseModel):
    transaction_hash: str = Field(alias="transactionHash")
    status: int
    block_number: int = Field(alias="blockNumber")
    logs: list[LogPayload] = Field(default_factory=list)

    @field_validator("status", "block_number", mode="before")
    @classmethod
    def _parse_int(cls, value: int | str) -> int:
        return _parse_quantity(value)
