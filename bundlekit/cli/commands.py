"""Command-line entry point for bundlekit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from dotenv import load_dotenv

from bundlekit import __version__
from bundlekit.archive import ArchiveBuilder, ArchiveSpec, RuntimeKind, compute_sha256
from bundlekit.build import Bundler, CommandBundler, build, dll, print_config, server
from bundlekit.config import assemble, resolve
from bundlekit.defaults import DEFAULTS, CliDefaults
from bundlekit.errors import BundlekitError
from bundlekit.install import PackageInstaller
from bundlekit.options import normalize
from bundlekit.tools import clean, compile_temp_dir, kill_ports, open_path, parse_ports, scaffold_config

logger = logging.getLogger("bundlekit")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    base_dir = _resolve_base_dir(args.base_dir)
    _load_local_env(base_dir)

    handlers = {
        "init": _handle_init,
        "install": _handle_install,
        "upgrade": _handle_upgrade,
        "print": _handle_print,
        "dll": _handle_dll,
        "build": _handle_build,
        "server": _handle_server,
        "start": _handle_server,
        "zip": _handle_archive,
        "tar": _handle_archive,
        "deploy": _handle_deploy,
        "clean": _handle_clean,
        "open": _handle_open,
        "kill": _handle_kill,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error(f"Unknown command '{args.command}'")
        return 1

    try:
        return handler(args, base_dir, DEFAULTS)
    except BundlekitError as exc:
        print(f"bundlekit: {exc}", file=sys.stderr)
        return 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bundlekit", description="Bundler config and build helper.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-f", "--filename", help="Bundler config file path.")
    parser.add_argument("-p", "--port", help="Dev server port.")
    parser.add_argument("-t", "--type", help="Build type: client, server, web, weex.")
    parser.add_argument("-w", "--watch", action="store_true", default=None, help="Watch and rebuild on change.")
    parser.add_argument("-m", "--md5", action="store_true", default=None, help="Hash js/css/image filenames.")
    parser.add_argument("-c", "--compress", action="store_true", default=None, help="Compress js/css/image.")
    parser.add_argument("-b", "--build", help="Combined flags: w(watch), m(hash), c(compress), e.g. wm, wmc.")
    parser.add_argument(
        "-s",
        "--size",
        nargs="?",
        const="analyzer",
        help="Bundle size tool: analyzer or stats (default analyzer).",
    )
    parser.add_argument("--dll", action="store_true", help="Only the dll config.")
    parser.add_argument("--web", action="store_true", help="Only the web configs.")
    parser.add_argument("--node", action="store_true", help="Only the node configs.")
    parser.add_argument("--devtool", help="Bundler devtool setting.")
    parser.add_argument("--base-dir", help="Project root (defaults to the current directory).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Write a starter config for a project.")
    init.add_argument("-r", "--registry", help="npm registry recorded in .npmrc.")
    init.add_argument("--framework", choices=["vue", "react", "weex"])

    install = subparsers.add_parser("install", help="Install missing project dependencies.")
    install.add_argument("--mode", help="Package manager: npm, cnpm, tnpm, yarn, pnpm.")

    upgrade = subparsers.add_parser("upgrade", help="Upgrade project packages.")
    upgrade.add_argument("--mode", help="Package manager: npm, cnpm, tnpm, yarn, pnpm.")

    print_cmd = subparsers.add_parser("print", help="Print the assembled bundler config.")
    print_cmd.add_argument("env", nargs="?")
    print_cmd.add_argument("-n", "--node", dest="node_key", help="Key path to print, e.g. module/rules or plugins.")

    for name, help_text in (
        ("dll", "Build the dll bundle."),
        ("build", "Build all selected targets."),
        ("server", "Build and start the dev server."),
        ("start", "Build and start the dev server."),
    ):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("env", nargs="?")

    for name in ("zip", "tar"):
        archive = subparsers.add_parser(name, help=f"Archive project files to a {name} file.")
        archive.add_argument("--filename", dest="archive_filename", help="Archive file name.")
        archive.add_argument("--source", help="Archive root path.")
        archive.add_argument("--target", help="Directory the archive is written to.")
        archive.add_argument("--deps", action="store_true", help="Install production dependencies first.")
        archive.add_argument("--mode", help="Package manager: npm, cnpm, tnpm, yarn, pnpm.")
        archive.add_argument("--registry", help="Dependency install registry url.")
        runtime = archive.add_mutually_exclusive_group()
        runtime.add_argument(
            "--node",
            "--nodejs",
            dest="runtime",
            action="store_const",
            const=RuntimeKind.NODE,
            help="Bundle the node runtime into node_modules.",
        )
        runtime.add_argument(
            "--alinode",
            dest="runtime",
            action="store_const",
            const=RuntimeKind.ALINODE,
            help="Bundle the alinode runtime into node_modules.",
        )

    subparsers.add_parser("deploy", help="Upload files to the deploy space.")

    clean_cmd = subparsers.add_parser("clean", help="Clean the compile cache; 'all' also removes build output.")
    clean_cmd.add_argument("dir", nargs="?")

    open_cmd = subparsers.add_parser("open", help="Open the compile cache dir.")
    open_cmd.add_argument("dir", nargs="?")

    kill = subparsers.add_parser("kill", help="Kill processes on ports (default 7001, 9000, 9001).")
    kill.add_argument("port", nargs="?")

    return parser


def _handle_init(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    written = scaffold_config(base_dir, framework=args.framework, registry=args.registry, defaults=defaults)
    _print_json({"written": [str(path) for path in written]})
    return 0


def _handle_install(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    install = {"check": True, "npm": args.mode or defaults.package_manager}
    flags = vars(args)
    resolved = resolve(
        flags,
        {"base_dir": base_dir, "install": install},
        defaults=defaults,
        installer=_build_installer(),
    )
    assemble(resolved, normalize(flags, {"install": install}), defaults=defaults)
    _print_json({"status": "ok", "package_manager": install["npm"]})
    return 0


def _handle_upgrade(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    package_manager = args.mode or defaults.package_manager
    _build_installer().upgrade(package_manager, base_dir)
    _print_json({"status": "ok", "package_manager": package_manager})
    return 0


def _handle_print(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    flags = vars(args)
    resolved = resolve(flags, {"base_dir": base_dir, "env": args.env}, defaults=defaults)
    assembled = assemble(resolved, normalize(flags), defaults=defaults)
    if args.node_key:
        for label, value in print_config(assembled, args.node_key, label=args.type):
            print(f"bundlekit: {label} {args.node_key} info:")
            print(json.dumps(value, indent=2, default=str))
    else:
        print("bundlekit: config info:")
        print(json.dumps(assembled.as_payload(), indent=2, default=str))
    return 0


def _handle_dll(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    flags = vars(args)
    resolved = resolve(flags, {"base_dir": base_dir, "env": args.env, "framework": "dll"}, defaults=defaults)
    option = normalize(flags, {"only_dll": True})
    report = dll(resolved, option, _build_bundler(base_dir, defaults), defaults=defaults)
    _print_json(report.to_dict())
    return 0 if report.ok else 1


def _handle_build(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    flags = vars(args)
    resolved = resolve(flags, {"base_dir": base_dir, "env": args.env}, defaults=defaults)
    option = normalize(flags)
    report = build(assemble(resolved, option, defaults=defaults), option, _build_bundler(base_dir, defaults))
    _print_json(report.to_dict())
    return 0 if report.ok else 1


def _handle_server(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    flags = vars(args)
    resolved = resolve(flags, {"base_dir": base_dir, "env": args.env}, defaults=defaults)
    option = normalize(flags)
    assembled = assemble(resolved, option, defaults=defaults)
    report = server(assembled, option, _build_bundler(base_dir, defaults), defaults=defaults)
    _print_json(report.to_dict())
    return 0 if report.ok else 1


def _handle_archive(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    spec = ArchiveSpec(
        filename=args.archive_filename,
        source_path=_resolve_optional_path(args.source, base_dir),
        target_path=_resolve_optional_path(args.target, base_dir),
        install_dependencies=args.deps,
        package_manager=args.mode or defaults.package_manager,
        registry=args.registry,
        runtime=args.runtime,
    )
    builder = ArchiveBuilder(workspace_root=base_dir, installer=_build_installer(), defaults=defaults)
    archive_path = builder.zip(spec) if args.command == "zip" else builder.tar(spec)
    _print_json(
        {
            "archive_path": str(archive_path),
            "format": args.command,
            "checksum": {"sha256": compute_sha256(archive_path)},
        }
    )
    return 0


def _handle_deploy(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    logger.info("deploy is not available yet.")
    return 0


def _handle_clean(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    removed = clean(base_dir, args.dir, defaults=defaults)
    _print_json({"removed": [str(path) for path in removed]})
    return 0


def _handle_open(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    open_path(args.dir or compile_temp_dir(base_dir, defaults))
    return 0


def _handle_kill(args: argparse.Namespace, base_dir: Path, defaults: CliDefaults) -> int:
    ports = parse_ports(args.port, defaults)
    _print_json({"ports": ports, "killed": kill_ports(ports)})
    return 0


def _build_bundler(base_dir: Path, defaults: CliDefaults) -> Bundler:
    return CommandBundler(cwd=base_dir, defaults=defaults)


def _build_installer() -> PackageInstaller:
    return PackageInstaller()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_local_env(base_dir: Path) -> None:
    env_file = base_dir / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)


def _resolve_base_dir(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_optional_path(value: Optional[str], base_dir: Path) -> Optional[Path]:
    if value is None:
        return None
    path = Path(value)
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _print_json(payload: Mapping[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
