"""
inkwell config show command - Display configuration.
"""

import json

from infra.config import ConfigManager, get_config_root


def cmd_config_show(args):
    """Show configuration (defaults when config.yaml doesn't exist)."""
    manager = ConfigManager(get_config_root())
    config = manager.load()

    token = config.drive.resolved_access_token()
    token_display = (token or "(not set)") if args.reveal_keys else _mask_key(token)

    if args.json:
        data = config.model_dump(mode="json")
        data['drive']['access_token'] = token_display
        print(json.dumps(data, indent=2, default=str))
        return

    source = manager.config_path if manager.exists() else f"{manager.config_path} (not created, showing defaults)"
    print(f"\n📋 Configuration")
    print(f"   Path: {source}\n")

    print("Conversion:")
    print(f"  processor: {config.processor}")
    print(f"  dpi: {config.dpi}")
    print(f"  ocr_concurrency: {config.ocr_concurrency}")
    print(f"  file_concurrency: {config.file_concurrency}")
    print(f"  render_reserve: {config.render_reserve}")
    print(f"  strict_render: {config.strict_render}")
    print(f"  formats: {', '.join(config.formats)}")
    print(f"  extensions: {', '.join(config.extensions)}")
    print(f"  page_separator: {config.page_separator!r}")
    print(f"  log_dir: {config.log_dir or '(disabled)'}")

    print("\nRetry:")
    print(f"  backoff_cap_seconds: {config.retry.backoff_cap_seconds}")
    print(f"  jitter_seconds: {config.retry.jitter_seconds}")

    print("\nGoogle Drive:")
    print(f"  access_token: {token_display}")
    print(f"  token_file: {config.drive.token_file or '(not set)'}")
    print(f"  timeout_seconds: {config.drive.timeout_seconds}")
    print()


def _mask_key(value: str) -> str:
    """Mask a token for display."""
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return value[:4] + "..." + value[-4:]
