#!/usr/bin/env python3
"""
Diploma Registry Command Line Interface

Usage:
    diploma-registry demo
    diploma-registry hash --file <file>
"""

import argparse
import sys
from pathlib import Path


def cmd_hash(args):
    """Print the content hash of a document."""
    from diploma_registry import content_hash, to_hex

    data = Path(args.file).read_bytes()
    print(to_hex(content_hash(data)))
    return 0


def cmd_demo(args):
    """Run a demonstration against an in-memory registry."""
    from diploma_registry import (
        BlockClock,
        DiplomaRegistry,
        ErrorCode,
        InMemoryTransferLedger,
        StaticAuthoritySet,
        content_hash,
    )

    issuer = "ST1TEST"
    authority = "ST2TEST"
    transfers = InMemoryTransferLedger()
    registry = DiplomaRegistry(
        authorities=StaticAuthoritySet([issuer]),
        transfers=transfers,
        clock=BlockClock(),
    )

    fields = dict(
        institution_id=1,
        student_id=1,
        template_id=1,
        content_hash=content_hash(b"demo diploma document"),
        issuance_date=100,
        degree_type="Bachelor",
        gpa=350,
        honors="Cum Laude",
        major="Computer Science",
        minor="Math",
        location="University City",
        currency="STX",
        expiry=200,
        credits=120,
        thesis_title="AI Thesis",
        advisor="Dr. Smith",
        committee=["Dr. A", "Dr. B"],
    )

    print("=" * 60)
    print("Diploma Registry Demonstration")
    print("=" * 60)

    print("\nScenario 1: Issue before the authority contract is set")
    result = registry.issue_diploma(**fields, caller=issuer)
    print(f"  ok={result.ok} error={ErrorCode(result.value).name}")

    registry.set_authority_contract(authority)
    print(f"\nAuthority contract: {authority}")

    print("\nScenario 2: Issue a diploma")
    result = registry.issue_diploma(**fields, caller=issuer)
    print(f"  ok={result.ok} id={result.value}")
    for t in transfers.transfers():
        print(f"  fee transfer: {t.amount} {t.sender} -> {t.recipient}")

    print("\nScenario 3: Issue the same document again")
    result = registry.issue_diploma(**fields, caller=issuer)
    print(f"  ok={result.ok} error={ErrorCode(result.value).name}")

    print("\nScenario 4: Update by the issuer, then by a stranger")
    print(f"  issuer:   ok={registry.update_diploma(0, 360, 'Summa Cum Laude', caller=issuer).ok}")
    print(f"  stranger: ok={registry.update_diploma(0, 100, '', caller='ST3FAKE').ok}")
    diploma = registry.get_diploma(0)
    print(f"  gpa={diploma.gpa} honors={diploma.honors!r}")

    print(f"\nDiplomas issued: {registry.get_diploma_count().value}")
    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Diploma Registry CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  diploma-registry demo                   Run demonstration
  diploma-registry hash -f diploma.pdf    Print a document's content hash
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    hash_parser = subparsers.add_parser("hash", help="Compute a document's content hash")
    hash_parser.add_argument("-f", "--file", required=True, help="Document file")

    subparsers.add_parser("demo", help="Run demonstration")

    args = parser.parse_args()

    if args.command == "hash":
        sys.exit(cmd_hash(args))
    elif args.command == "demo":
        sys.exit(cmd_demo(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
