#!/usr/bin/env python3
"""
SecureVault Console
===================

[VAULT] Runs one vault session from the terminal:
- Generates a fresh session key pair (never written to disk)
- Loads the ledger snapshot from the SQLite store
- Interactive shell for credentials, revocation, verification and proofs

The signing key only lives for the session. Blocks loaded from an earlier
session still validate, but their signatures were made with an old key and
no longer verify against the new one.

Usage:
    python main.py [--db FILE] [--difficulty N] [--no-persist]

Examples:
    # Persistent vault
    python main.py --db vault.db

    # Throwaway in-memory vault with fast mining
    python main.py --no-persist --difficulty 2

    # In the shell
    >>> register ahmad.json
    >>> verify 1 fullName "AHMAD BIN ABDULLAH"
    >>> prove age 33 18
"""

import argparse
import asyncio
import json
import logging
import shlex
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# .env must be loaded before config reads the environment
load_dotenv()

from config import config
from core.errors import VaultError
from core.logger import ActivityLogHandler, configure_logging
from core.persistence import VaultStore
from identity.mykad import (
    credential_specs,
    generate_smart_id_identifier,
    validate_smart_id,
)
from ledger.block import Block, MultiCredentialPayload, RevocationMarker, payload_records
from vault.session import VaultSession
from zkp import (
    ClaimKind,
    ClaimProof,
    ClaimRequest,
    explain_threshold_proof,
    get_claim_info,
    verify_claim,
)

logger = logging.getLogger("vault")

HELP_TEXT = """
Available commands:
  id                               - Show session public key
  add <attribute> <value> [--double]
                                   - Add one credential (double-hash with --double)
  register <file.json> [label]     - Add a Smart ID (JSON) as one credential set
  revoke <index>                   - Revoke a block
  verify <index> <attribute> <value>
                                   - Verify a value against a block
  check <attribute> <value>        - Verify via the active credential map
  blocks                           - List blocks
  block <index>                    - Show one block as JSON
  valid                            - Validate the ledger

[ZKP] Proofs:
  prove age <actual> <min>         - Threshold proof + verification
  prove range <actual> <min> <max> - Range proof + verification
  prove income <actual> <threshold>
  claim age18|age21 <birth_year>
  claim citizenship <value>
  claim residency <state> <ic_number>
  claim vaccinated | clean
  explain <actual> <min>           - Show the hash-chain arithmetic
  info <claim_kind>                - What a claim proves and hides

Other:
  help                             - Show this help
  quit                             - Exit
"""


def describe_block(block: Block, revoked: bool) -> str:
    payload = block.payload
    status = " [REVOKED]" if revoked else ""
    if isinstance(payload, RevocationMarker):
        detail = f"revokes #{payload.target_index}"
    elif isinstance(payload, MultiCredentialPayload):
        attributes = ", ".join(r.attribute for r in payload.records)
        label = f"{payload.subject_label}: " if payload.subject_label else ""
        detail = f"{label}{attributes}"
    else:
        detail = ", ".join(r.attribute for r in payload_records(block.payload)) or "-"
    return f"  #{block.index:<3} {block.kind:<15} {block.hash[:16]}... {detail}{status}"


def _claim_result(claim: ClaimProof, request: ClaimRequest) -> None:
    print(f"[OK] {claim.description}")
    print(f"  proof:      {claim.proof[:64]}")
    print(f"  commitment: {claim.commitment}")
    print(f"  verified:   {verify_claim(claim, request)}")


async def execute_command(session: VaultSession, line: str) -> bool:
    """
    Run one shell command. Returns False when the shell should exit.

    Vault errors are reported and the shell keeps going.
    """
    try:
        parts = shlex.split(line)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return True
    if not parts:
        return True

    cmd, args = parts[0].lower(), parts[1:]

    try:
        if cmd in ("quit", "exit"):
            return False

        elif cmd == "help":
            print(HELP_TEXT)

        elif cmd == "id":
            print(f"Public key: {session.key_pair.public_key_b64}")

        elif cmd == "add":
            double = "--double" in args
            args = [a for a in args if a != "--double"]
            if len(args) != 2:
                print("[ERROR] Usage: add <attribute> <value> [--double]")
                return True
            block = await session.add_credential(args[0], args[1], double_hash=double)
            print(f"[OK] Block #{block.index} mined (nonce {block.nonce})")

        elif cmd == "register":
            if not args:
                print("[ERROR] Usage: register <file.json> [label]")
                return True
            data = json.loads(Path(args[0]).read_text())
            result = validate_smart_id(data)
            if not result.is_valid:
                for error in result.errors:
                    print(f"[ERROR] {error}")
                return True
            label = args[1] if len(args) > 1 else generate_smart_id_identifier(data["icNumber"])
            block = await session.add_credential_set(credential_specs(data), subject_label=label)
            print(f"[OK] Block #{block.index} mined for {label}")

        elif cmd == "revoke":
            if len(args) != 1:
                print("[ERROR] Usage: revoke <index>")
                return True
            block = await session.revoke_block(int(args[0]))
            print(f"[OK] Block #{args[0]} revoked by block #{block.index}")

        elif cmd == "verify":
            if len(args) != 3:
                print("[ERROR] Usage: verify <index> <attribute> <value>")
                return True
            ok = session.verify_attribute(int(args[0]), args[1], args[2])
            print("[OK] Verified" if ok else "[FAIL] Not verified")

        elif cmd == "check":
            if len(args) != 2:
                print("[ERROR] Usage: check <attribute> <value>")
                return True
            ok = session.verify_credential_value(args[0], args[1])
            print("[OK] Verified" if ok else "[FAIL] Not verified")

        elif cmd == "blocks":
            blocks = session.list_blocks()
            print(f"[INFO] Ledger ({len(blocks)} blocks, difficulty {session.blockchain.difficulty}):")
            for block in blocks:
                print(describe_block(block, session.is_revoked(block.index)))

        elif cmd == "block":
            if len(args) != 1:
                print("[ERROR] Usage: block <index>")
                return True
            block = session.get_block(int(args[0]))
            if block is None:
                print(f"[ERROR] No block #{args[0]}")
            else:
                print(json.dumps(block.to_dict(), indent=2))

        elif cmd == "valid":
            violation = session.blockchain.find_integrity_violation()
            if violation is None:
                print("[OK] Ledger is valid")
            else:
                print(f"[FAIL] Block #{violation.index}: {violation.reason} ({violation.detail})")

        elif cmd == "prove":
            _prove(session, args)

        elif cmd == "claim":
            _claim(session, args)

        elif cmd == "explain":
            if len(args) != 2:
                print("[ERROR] Usage: explain <actual> <min>")
                return True
            print(explain_threshold_proof(int(args[0]), int(args[1])))

        elif cmd == "info":
            if len(args) != 1:
                print("[ERROR] Usage: info <claim_kind>")
                return True
            info = get_claim_info(ClaimKind(args[0]))
            print(f"  Proves:  {info.what_you_prove}")
            print(f"  Hidden:  {info.what_stays_hidden}")
            print(f"  Used by: {info.real_world_use}")

        else:
            print(f"[ERROR] Unknown command: {cmd}. Type 'help'.")

    except VaultError as e:
        print(f"[ERROR] {type(e).__name__}: {e}")
    except (ValueError, OSError) as e:
        print(f"[ERROR] {e}")

    return True


def _prove(session: VaultSession, args: List[str]) -> None:
    if not args:
        print("[ERROR] Usage: prove age|range|income ...")
        return

    kind, values = args[0], [int(a) for a in args[1:]]
    if kind in ("age", "income") and len(values) == 2:
        actual, minimum = values
        proof = session.prove_threshold(actual, minimum)
        ok = session.verify_threshold(proof.proof, proof.encrypted_threshold_value, minimum)
        print(f"[OK] Proof of value >= {minimum}: verified={ok}")
        print(f"  proof:      {proof.proof}")
        print(f"  commitment: {proof.encrypted_threshold_value}")
    elif kind == "range" and len(values) == 3:
        actual, minimum, maximum = values
        range_proof = session.prove_range(actual, minimum, maximum)
        result = session.verify_range(range_proof, minimum, maximum)
        print(
            f"[OK] Proof of {minimum} <= value <= {maximum}: "
            f"lower={result.lower_bound_valid} upper={result.upper_bound_valid}"
        )
    else:
        print("[ERROR] Usage: prove age <actual> <min> | range <actual> <min> <max> | income <actual> <threshold>")


def _claim(session: VaultSession, args: List[str]) -> None:
    if not args:
        print("[ERROR] Usage: claim <kind> ...")
        return

    kind, rest = args[0], args[1:]
    if kind == "age18" and len(rest) == 1:
        _claim_result(session.prove_age_over_18(int(rest[0])), ClaimRequest(ClaimKind.AGE_OVER_18))
    elif kind == "age21" and len(rest) == 1:
        _claim_result(session.prove_age_over_21(int(rest[0])), ClaimRequest(ClaimKind.AGE_OVER_21))
    elif kind == "citizenship" and rest:
        _claim_result(session.prove_citizenship(" ".join(rest)), ClaimRequest(ClaimKind.CITIZENSHIP))
    elif kind == "residency" and len(rest) == 2:
        _claim_result(session.prove_residency(rest[0], rest[1]), ClaimRequest(ClaimKind.RESIDENCY))
    elif kind == "vaccinated":
        _claim_result(session.prove_vaccination_status(True), ClaimRequest(ClaimKind.VACCINATION_STATUS))
    elif kind == "clean":
        _claim_result(session.prove_no_criminal_record(False), ClaimRequest(ClaimKind.NO_CRIMINAL_RECORD))
    else:
        print("[ERROR] Usage: claim age18|age21 <birth_year> | citizenship <value> | "
              "residency <state> <ic> | vaccinated | clean")


async def interactive_shell(session: VaultSession) -> None:
    """Read commands until quit/EOF."""
    print("\n" + "=" * 60)
    print("SecureVault Interactive Shell")
    print(f"Public key: {session.key_pair.public_key_b64}")
    print(f"Blocks: {len(session.blockchain)} | Difficulty: {session.blockchain.difficulty}")
    print("Type 'help' for commands, 'quit' to exit")
    print("=" * 60 + "\n")

    loop = asyncio.get_running_loop()
    while True:
        try:
            line = await loop.run_in_executor(None, lambda: input(">>> "))
        except EOFError:
            break
        if not await execute_command(session, line.strip()):
            break


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SecureVault: credential ledger and zero-knowledge proofs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db", "-d",
        type=str,
        default=config.persistence.database_path,
        help=f"Database file path (default: {config.persistence.database_path})",
    )
    parser.add_argument(
        "--difficulty",
        type=int,
        default=config.ledger.difficulty,
        help=f"Proof-of-work difficulty in hex zeros (default: {config.ledger.difficulty})",
    )
    parser.add_argument(
        "--no-persist",
        action="store_true",
        help="Keep the ledger in memory only",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=config.logging.level,
        help=f"Logging level (default: {config.logging.level})",
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    configure_logging(args.log_level)
    logging.getLogger().addHandler(ActivityLogHandler())

    store = None if args.no_persist else VaultStore(args.db)
    session = VaultSession(store=store, difficulty=args.difficulty)
    await session.initialize()

    if not session.is_ledger_valid():
        logger.warning("[VAULT] Ledger failed validation, see 'valid' for details")

    await interactive_shell(session)
    logger.info("[VAULT] Session closed")


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    run()
