"""
Command-line interface for traceprov.

Usage:
  traceprov stamp clip.mp4 -o ai_generated --provider-id p1 --provider-name "Provider One" \\
      --model-id m1 --model-version 1.0          # Stamp (sidecar files)
  traceprov stamp clip.mp4 ... --embed           # Also embed into the container
  traceprov verify clip.mp4                      # Verify provenance
  traceprov verify --json clip.mp4               # JSON report
  traceprov keygen -o trace-key.pem              # Generate a signing key pair
  traceprov inspect clip.mp4                     # Show box tree and embedded manifest
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from traceprov._version import __version__
from traceprov.config import DEFAULT_KEY_FILE, get_config
from traceprov.embedders import EmbedError, detect_container, get_embedder
from traceprov.formatters import (
    format_boxes,
    format_default,
    format_embedded,
    format_json,
    format_quiet,
    format_stamp,
)
from traceprov.manifest import ManifestError
from traceprov.models import ModelInfo, Operation, Provider
from traceprov.signing import (
    KeyFormatError,
    derive_public_key,
    encode_public_key,
    generate_key_pair,
    public_key_path_for,
    read_key_file,
    save_key_pair,
)
from traceprov.stamp import input_hash_for, maybe_embed, stamp_asset
from traceprov.utils.container import parse_mp4_boxes
from traceprov.verify import verify_asset


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="traceprov",
        description="TRACE provenance for video - stamp, embed, and verify.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  stamp     Create and sign a provenance manifest (sidecar files, optional embed)
  verify    Verify provenance: VALID, INVALID, or INCONCLUSIVE
  keygen    Generate an Ed25519 key pair
  inspect   Show the container box tree and any embedded TRACE manifest

Configuration:
  ~/.traceprov/config.yaml or TRACEPROV_* environment variables

Examples:
  traceprov stamp clip.mp4 -o ai_generated --provider-id p1 --provider-name "Provider One" \\
      --model-id m1 --model-version 1.0 --embed
  traceprov stamp out.mp4 -o ai_transformed ... --input-file clip.mp4
  traceprov verify clip.mp4
  traceprov verify -q *.mp4
        """,
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # stamp
    stamp = subparsers.add_parser("stamp", help="Stamp a video file with TRACE provenance")
    stamp.add_argument("file", help="Path to the video file to stamp")
    stamp.add_argument(
        "-o",
        "--operation",
        required=True,
        choices=[op.value for op in Operation],
        help="Operation type",
    )
    stamp.add_argument("--provider-id", help="Provider identifier")
    stamp.add_argument("--provider-name", help="Provider name")
    stamp.add_argument("--model-id", required=True, help="Model identifier")
    stamp.add_argument("--model-version", required=True, help="Model version")
    stamp.add_argument(
        "-k",
        "--key",
        help="Path to private key file (a new key is generated and saved if missing)",
    )
    stamp.add_argument(
        "--provider-key",
        help="Path to provider public key file (derived from the private key if omitted)",
    )
    input_group = stamp.add_mutually_exclusive_group()
    input_group.add_argument(
        "--input-hash", help="Input hash for transformation operations (sha256:... format)"
    )
    input_group.add_argument(
        "--input-file", help="Source video of a transformation (its hash is recorded)"
    )
    stamp.add_argument(
        "--embed",
        action="store_true",
        default=None,
        help="Also embed the manifest into the container (MP4 uuid box / WebM marker)",
    )
    stamp.add_argument(
        "--no-embed",
        dest="embed",
        action="store_false",
        help="Write sidecar files only",
    )
    stamp.set_defaults(embed=None)

    # verify
    verify = subparsers.add_parser("verify", help="Verify TRACE provenance for video files")
    verify.add_argument("files", nargs="+", help="Video file(s) to verify")
    verify.add_argument("-m", "--manifest", help="Path to manifest file (auto-detected if omitted)")
    verify.add_argument(
        "-s", "--signature", help="Path to signature file (auto-detected if omitted)"
    )
    mode_group = verify.add_mutually_exclusive_group()
    mode_group.add_argument("--json", action="store_true", help="Print the report as JSON")
    mode_group.add_argument("-q", "--quiet", action="store_true", help="One line per file")

    # keygen
    keygen = subparsers.add_parser("keygen", help="Generate an Ed25519 key pair")
    keygen.add_argument(
        "-o",
        "--output",
        default=DEFAULT_KEY_FILE,
        help=f"Private key path (default: {DEFAULT_KEY_FILE})",
    )
    keygen.add_argument("--force", action="store_true", help="Overwrite existing key files")

    # inspect
    inspect = subparsers.add_parser("inspect", help="Show container structure and embedded data")
    inspect.add_argument("file", help="Video file to inspect")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for traceprov CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "stamp":
        return cmd_stamp(args)
    if args.command == "verify":
        return cmd_verify(args)
    if args.command == "keygen":
        return cmd_keygen(args)
    if args.command == "inspect":
        return cmd_inspect(args)

    parser.print_help()
    return 1


def _load_or_create_private_key(key_path: str | None) -> str:
    """Read the signing key, generating and saving a new pair if there is none."""
    if key_path and Path(key_path).exists():
        return read_key_file(key_path)

    print("Generating new Ed25519 key pair...")
    key_pair = generate_key_pair()
    private_path, public_path = save_key_pair(key_pair, key_path or Path.cwd() / DEFAULT_KEY_FILE)
    print(f"Private key saved to: {private_path}")
    print(f"Public key saved to: {public_path}")
    return key_pair.private_key


def cmd_stamp(args: argparse.Namespace) -> int:
    """Stamp a video file.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    config = get_config()
    video_file = args.file

    if not Path(video_file).exists():
        print(f"Error: Video file not found: {video_file}", file=sys.stderr)
        return 1

    provider_id = args.provider_id or config.provider.id
    provider_name = args.provider_name or config.provider.name
    if not provider_id or not provider_name:
        print(
            "Error: --provider-id and --provider-name are required "
            "(or set provider.id / provider.name in the config file)",
            file=sys.stderr,
        )
        return 1

    try:
        private_key = _load_or_create_private_key(args.key or config.keys.private_key)

        provider_key_path = args.provider_key or config.keys.public_key
        if provider_key_path and Path(provider_key_path).exists():
            provider_public_key = encode_public_key(read_key_file(provider_key_path))
        else:
            provider_public_key = encode_public_key(derive_public_key(private_key))

        input_hash = args.input_hash
        if args.input_file:
            input_hash = input_hash_for(args.input_file)

        if args.embed is None:
            # Embedding requested only by config: skip unsupported containers
            embed = config.stamp.embed and maybe_embed(video_file)
        else:
            embed = args.embed

        provider = Provider(id=provider_id, name=provider_name, public_key=provider_public_key)
        model = ModelInfo(id=args.model_id, version=args.model_version)

        print(f"Creating provenance manifest for: {video_file}")
        result = stamp_asset(
            video_file,
            args.operation,
            provider,
            model,
            private_key,
            input_hash=input_hash,
            embed=embed,
            strict_media_type=config.stamp.strict_media_type,
        )
    except (ManifestError, EmbedError, KeyFormatError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_stamp(result))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify one or more video files.

    Returns:
        Exit code (0 if every file is VALID, 1 otherwise)
    """
    if (args.manifest or args.signature) and len(args.files) != 1:
        print("Error: --manifest/--signature require exactly one input file", file=sys.stderr)
        return 1

    all_valid = True
    for video_file in args.files:
        report = verify_asset(video_file, args.manifest, args.signature)
        all_valid = all_valid and report.is_valid

        if args.json:
            print(format_json(report))
        elif args.quiet:
            print(format_quiet(report))
        else:
            print(f"Verifying provenance for: {video_file}")
            print(format_default(report))
            print()

    return 0 if all_valid else 1


def cmd_keygen(args: argparse.Namespace) -> int:
    """Generate and save a key pair."""
    private_path = Path(args.output)
    public_path = public_key_path_for(private_path)
    if (private_path.exists() or public_path.exists()) and not args.force:
        print("Error: Key file exists. Use --force to overwrite.", file=sys.stderr)
        return 1

    private_path, public_path = save_key_pair(generate_key_pair(), private_path)
    print(f"Private key saved to: {private_path}")
    print(f"Public key saved to: {public_path}")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print the box tree and embedded TRACE metadata of a file."""
    path = Path(args.file)
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    container = detect_container(data)
    print(f"File: {path.name}")
    print(f"Container: {container or 'unknown'}")

    if container == "mp4":
        print()
        print(format_boxes(parse_mp4_boxes(data)))

    embedder = get_embedder(container) if container else None
    print()
    print(format_embedded(embedder.extract(data) if embedder else None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
