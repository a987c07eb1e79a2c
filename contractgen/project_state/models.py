from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ContractCategory(str, Enum):
    ERC20 = "ERC20"
    ERC721 = "ERC721"
    ERC1155 = "ERC1155"
    GOVERNANCE = "Governance"
    MULTISIG = "MultiSig"
    CUSTOM = "Custom"


class DeploymentStatus(str, Enum):
    GENERATED = "generated"
    DEPLOYING = "deploying"
    DEPLOYED = "deployed"
    FAILED = "failed"


class ContractRequest(BaseModel):
    category: ContractCategory
    description: str
    parameters: Dict[str, str] = Field(default_factory=dict)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def display_name(category: ContractCategory, created_at: datetime) -> str:
    return f"{category.value}_{int(created_at.timestamp() * 1000)}"


class GeneratedContract(BaseModel):
    """
    A generated contract as held by the ContractStore.

    Instances are immutable; status changes produce a new instance through
    `with_status`, keeping `id` and `created_at`.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str
    code: str
    explanation: str
    status: DeploymentStatus = DeploymentStatus.GENERATED
    contract_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    storage_reference: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _address_matches_status(self) -> "GeneratedContract":
        deployed = self.status == DeploymentStatus.DEPLOYED
        if deployed and not self.contract_address:
            raise ValueError("a deployed contract must have a contract_address")
        if not deployed and self.contract_address is not None:
            raise ValueError(f"contract_address must be empty while status is '{self.status.value}'")
        return self

    @classmethod
    def create(cls, category: ContractCategory, code: str, explanation: str) -> "GeneratedContract":
        created_at = _utcnow()
        return cls(
            name=display_name(category, created_at),
            code=code,
            explanation=explanation,
            created_at=created_at,
        )

    def with_status(
        self,
        status: DeploymentStatus,
        contract_address: Optional[str] = None,
        transaction_hash: Optional[str] = None,
        storage_reference: Optional[str] = None,
    ) -> "GeneratedContract":
        data = self.model_dump()
        data.update(
            status=status,
            contract_address=contract_address,
            transaction_hash=transaction_hash,
            storage_reference=storage_reference or self.storage_reference,
        )
        return GeneratedContract(**data)


class DeploymentResult(BaseModel):
    address: str
    transaction_id: str
    status: str


# Wire replies. Anything that fails validation here is a MalformedResponse.

class CompletionMessage(BaseModel):
    content: str


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionReply(BaseModel):
    choices: List[CompletionChoice] = Field(min_length=1)


class UploadReply(BaseModel):
    ipfs_hash: str


class DeployReply(BaseModel):
    model_config = ConfigDict(strict=True)

    contract_address: str
    transaction_hash: str
    status: str
