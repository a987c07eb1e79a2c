from __future__ import annotations

import threading
from typing import Dict, List, Optional, Union

from contractgen.agents.contract_writer.agent import ContractWriterAgent
from contractgen.deploy.providers.deployment_api import DeploymentClient
from contractgen.llm.providers.chat_completions_api import ChatCompletionsProvider
from contractgen.orchestrator.config import OrchestratorConfig
from contractgen.project_state.contract_store import ContractStore
from contractgen.project_state.models import (
    ContractCategory,
    ContractRequest,
    DeploymentStatus,
    GeneratedContract,
)
from contractgen.utils.errors import ContractGenError
from contractgen.utils.logger import get_logger


class Orchestrator:
    """
    Top-level controller.

    Owns the ContractStore and drives the pipeline:
    1) generate: request -> prompt -> contract writer -> new `generated` contract at the front
    2) deploy:   `generated` -> `deploying` -> metadata upload + deploy -> `deployed` | `failed`

    All store writes go through `_write_lock`. Network calls run outside it.
    Failures from the remote services end up in `last_error`; they are not raised.
    """

    def __init__(
        self,
        cfg: OrchestratorConfig,
        writer: Optional[ContractWriterAgent] = None,
        deployer: Optional[DeploymentClient] = None,
        store: Optional[ContractStore] = None,
    ) -> None:
        self.cfg = cfg
        self.logger = get_logger("Orchestrator")
        self.store = store or ContractStore()

        if writer is None:
            llm = ChatCompletionsProvider(
                api_key=cfg.completion.api_key,
                url=cfg.completion.url,
                model=cfg.completion.model,
            )
            writer = ContractWriterAgent(
                llm,
                max_tokens=cfg.completion.max_tokens,
                temperature=cfg.completion.temperature,
            )
        self.writer = writer

        if deployer is None and cfg.deployment.api_key:
            deployer = DeploymentClient(
                api_key=cfg.deployment.api_key,
                base_url=cfg.deployment.base_url,
                compiler_version=cfg.deployment.compiler_version,
                chain=cfg.deployment.chain,
                upload_path=cfg.deployment.upload_path,
                deploy_path=cfg.deployment.deploy_path,
                success_statuses=cfg.deployment.success_statuses,
            )
        self.deployer = deployer

        self._write_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._generating = 0
        self._deploying = 0
        self._last_error: Optional[str] = None

    # ---------- presentation state ----------

    @property
    def is_generating(self) -> bool:
        with self._state_lock:
            return self._generating > 0

    @property
    def is_deploying(self) -> bool:
        with self._state_lock:
            return self._deploying > 0

    @property
    def last_error(self) -> Optional[str]:
        with self._state_lock:
            return self._last_error

    @property
    def contracts(self) -> List[GeneratedContract]:
        return self.store.all()

    def clear_error(self) -> None:
        self._set_error(None)

    # ---------- operations ----------

    def generate(
        self,
        category: Union[ContractCategory, str],
        description: str,
        parameters: Optional[Dict[str, str]] = None,
    ) -> Optional[GeneratedContract]:
        request = ContractRequest(
            category=category,
            description=description,
            parameters=parameters or {},
        )

        self._bump("_generating", 1)
        try:
            try:
                code, explanation = self.writer.run(request)
            except ContractGenError as exc:
                self.logger.error("Contract generation failed: %s", exc)
                self._set_error(f"Failed to generate contract: {exc}")
                return None

            contract = GeneratedContract.create(request.category, code, explanation)
            with self._write_lock:
                self.store.insert_front(contract)

            self._set_error(None)
            self.logger.info("Generated contract %s (%s)", contract.name, contract.id)
            return contract
        finally:
            self._bump("_generating", -1)

    def deploy(self, contract_id: str) -> Optional[GeneratedContract]:
        self._bump("_deploying", 1)
        try:
            contract = self._begin_deploy(contract_id)
            if contract is None:
                return None

            try:
                reference = self.deployer.upload_metadata(
                    contract.code,
                    {"name": contract.name, "description": contract.explanation},
                )
                result = self.deployer.deploy(contract.code, contract.name)
                deployed = contract.with_status(
                    DeploymentStatus.DEPLOYED,
                    contract_address=result.address,
                    transaction_hash=result.transaction_id,
                    storage_reference=reference,
                )
                with self._write_lock:
                    self.store.replace_at(contract_id, deployed)
            except ContractGenError as exc:
                self.logger.error("Deployment of %s failed: %s", contract.name, exc)
                self._mark_failed(contract)
                self._set_error(f"Failed to deploy contract: {exc}")
                return None
            except Exception:
                self.logger.exception("Unexpected error while deploying %s", contract.name)
                self._mark_failed(contract)
                raise

            self._set_error(None)
            self.logger.info("Contract %s deployed at %s", deployed.name, deployed.contract_address)
            return deployed
        finally:
            self._bump("_deploying", -1)

    # ---------- helpers ----------

    def _begin_deploy(self, contract_id: str) -> Optional[GeneratedContract]:
        """Check the contract can be deployed and mark it `deploying`, atomically."""
        if self.deployer is None:
            self._set_error("Deployment provider is not configured")
            return None

        with self._write_lock:
            contract = self.store.find_by_id(contract_id)
            if contract is None:
                error = f"Contract {contract_id} not found"
            elif contract.status != DeploymentStatus.GENERATED:
                error = f"Contract {contract.name} cannot be deployed from status '{contract.status.value}'"
            else:
                deploying = contract.with_status(DeploymentStatus.DEPLOYING)
                self.store.replace_at(contract_id, deploying)
                return deploying

        self.logger.warning(error)
        self._set_error(error)
        return None

    def _mark_failed(self, contract: GeneratedContract) -> None:
        # `deploying` is never left behind: every exit after _begin_deploy ends deployed or failed
        with self._write_lock:
            self.store.replace_at(contract.id, contract.with_status(DeploymentStatus.FAILED))

    def _bump(self, counter: str, delta: int) -> None:
        with self._state_lock:
            setattr(self, counter, getattr(self, counter) + delta)

    def _set_error(self, message: Optional[str]) -> None:
        with self._state_lock:
            self._last_error = message
