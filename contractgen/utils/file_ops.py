import re
from pathlib import Path
from typing import List, Union

from contractgen.project_state.models import GeneratedContract

PathLike = Union[str, Path]

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def ensure_dir(path: PathLike) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def write_contract_files(contract: GeneratedContract, out_dir: PathLike) -> List[Path]:
    """Write <name>.sol (source) and <name>.md (explanation + deployment info) into out_dir."""
    out = ensure_dir(out_dir)
    stem = _UNSAFE_CHARS_RE.sub("_", contract.name).strip("_") or contract.id

    sol_path = out / f"{stem}.sol"
    sol_path.write_text(contract.code.rstrip() + "\n", encoding="utf-8")

    notes = [
        f"# {contract.name}",
        "",
        f"- Status: {contract.status.value}",
        f"- Created: {contract.created_at.isoformat()}",
    ]
    if contract.contract_address:
        notes.append(f"- Address: {contract.contract_address}")
    if contract.transaction_hash:
        notes.append(f"- Transaction: {contract.transaction_hash}")
    if contract.storage_reference:
        notes.append(f"- Storage reference: {contract.storage_reference}")
    notes.extend(["", "## Explanation", "", contract.explanation, ""])

    md_path = out / f"{stem}.md"
    md_path.write_text("\n".join(notes), encoding="utf-8")
    return [sol_path, md_path]
