from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from contractgen.orchestrator.config import load_config
from contractgen.orchestrator.orchestrator import Orchestrator
from contractgen.project_state.models import ContractCategory
from contractgen.utils.file_ops import write_contract_files
from contractgen.utils.logger import get_logger


def _parse_param(raw: str) -> Tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"Expected key=value, got '{raw}'")
    return key.strip(), value.strip()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a Solidity smart contract with an LLM and optionally deploy it."
    )
    parser.add_argument(
        "--category",
        required=True,
        choices=[c.value for c in ContractCategory],
        help="Contract category.",
    )
    parser.add_argument(
        "--description",
        required=True,
        help="What the contract should do, e.g. 'collectible art series'.",
    )
    parser.add_argument(
        "--param",
        dest="params",
        action="append",
        type=_parse_param,
        default=[],
        metavar="KEY=VALUE",
        help="Contract parameter (repeatable), e.g. --param tokenName=Foo",
    )
    parser.add_argument(
        "--deploy",
        action="store_true",
        help="Deploy the generated contract through the deployment provider.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional YAML config file.",
    )
    parser.add_argument(
        "--out-dir",
        type=str,
        default=None,
        help="Directory to write the .sol source and explanation into.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logger = get_logger("main")

    cfg = load_config(Path(args.config) if args.config else None)
    if args.out_dir:
        cfg.out_dir = Path(args.out_dir).resolve()

    orchestrator = Orchestrator(cfg)
    parameters: Dict[str, str] = dict(args.params)

    contract = orchestrator.generate(args.category, args.description, parameters)
    if contract is None:
        logger.error(orchestrator.last_error)
        return 1
    logger.info("Generated %s:\n%s\n\nExplanation:\n%s", contract.name, contract.code, contract.explanation)

    exit_code = 0
    if args.deploy:
        deployed = orchestrator.deploy(contract.id)
        if deployed is None:
            logger.error(orchestrator.last_error)
            exit_code = 1
        else:
            logger.info("Deployed at %s (tx %s)", deployed.contract_address, deployed.transaction_hash)

    if cfg.out_dir is not None:
        final = orchestrator.store.find_by_id(contract.id) or contract
        for path in write_contract_files(final, cfg.out_dir):
            logger.info("Wrote %s", path)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
