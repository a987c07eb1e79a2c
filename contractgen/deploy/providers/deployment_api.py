from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from contractgen.project_state.models import DeployReply, DeploymentResult, UploadReply
from contractgen.utils.errors import MalformedResponse, ProviderReportedFailure, RequestFailure

logger = logging.getLogger(__name__)

DEFAULT_DEPLOY_BASE_URL = "https://api.contractdeploy.io/v1"
DEFAULT_COMPILER_VERSION = "0.8.19"
DEFAULT_CHAIN = "ethereum-sepolia"
METADATA_TYPE = "smart_contract"

ReplyT = TypeVar("ReplyT", bound=BaseModel)


class DeploymentClient:
    """
    Client for the deployment provider.

    Two independent calls under one base URL, both bearer-authorized JSON POSTs:
    - upload_metadata: stores code + metadata, returns a storage reference (IPFS hash)
    - deploy: compiles and deploys source, returns address / tx hash / status
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_DEPLOY_BASE_URL,
        compiler_version: str = DEFAULT_COMPILER_VERSION,
        chain: str = DEFAULT_CHAIN,
        upload_path: str = "/storage/upload",
        deploy_path: str = "/contracts/deploy",
        success_statuses: Iterable[str] = ("success",),
    ) -> None:
        if not api_key:
            raise ValueError("Deployment API key is not set")

        self.base_url = base_url.rstrip("/")
        self.compiler_version = compiler_version
        self.chain = chain
        self.upload_path = upload_path
        self.deploy_path = deploy_path
        self.success_statuses = {s.lower() for s in success_statuses}
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def upload_metadata(self, code: str, metadata: Dict[str, str]) -> str:
        """Upload contract code + metadata to provider storage; returns the storage reference."""
        payload = {
            "contract_code": code,
            "metadata": {**metadata, "type": METADATA_TYPE},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        reply = self._post(self.upload_path, payload, UploadReply)
        logger.info("DeploymentClient: metadata uploaded, reference=%s", reply.ipfs_hash)
        return reply.ipfs_hash

    def deploy(self, code: str, name: str) -> DeploymentResult:
        payload = {
            "contractSourceCode": code,
            "contractName": name,
            "compilerVersion": self.compiler_version,
            "chain": self.chain,
        }
        reply = self._post(self.deploy_path, payload, DeployReply)

        if reply.status.lower() not in self.success_statuses:
            logger.error("DeploymentClient: provider reported status=%s for %s", reply.status, name)
            raise ProviderReportedFailure(reply.status, reply.model_dump())

        if not reply.contract_address.strip():
            logger.error("DeploymentClient: success reply for %s has no contract address", name)
            raise MalformedResponse(f"Deploy reply for {name} reports success without a contract address")

        logger.info("DeploymentClient: %s deployed at %s (tx %s)", name, reply.contract_address, reply.transaction_hash)
        return DeploymentResult(
            address=reply.contract_address,
            transaction_id=reply.transaction_hash,
            status=reply.status,
        )

    def _post(self, path: str, payload: Dict[str, Any], reply_model: Type[ReplyT]) -> ReplyT:
        url = f"{self.base_url}{path}"
        logger.info("DeploymentClient: POST %s", url)
        try:
            resp = requests.post(url, json=payload, headers=self._headers)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.error("DeploymentClient: request to %s failed: %s", url, exc)
            raise RequestFailure(f"Request to {url} failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponse(f"Reply from {url} is not valid JSON") from exc

        try:
            return reply_model.model_validate(data)
        except ValidationError as exc:
            logger.error("DeploymentClient: unexpected reply from %s: %s", url, data)
            raise MalformedResponse(f"Unexpected reply format from {url}") from exc
