# main.py

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

# --- 核心模块导入 ---
from config import Config
from recovery import ParseDiagnostic, build_diagnostic, recover

EXIT_OK = 0
EXIT_UNRECOVERABLE = 1
EXIT_BAD_INPUT = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="json-recover",
        description="从模型返回的（可能损坏或被截断的）文本中恢复 JSON",
    )
    parser.add_argument("path", nargs="?", default="-", help="候选文本文件路径，'-' 表示标准输入")
    parser.add_argument(
        "--strict-brackets",
        action="store_true",
        default=None,
        help="括号补全使用括号栈而非全局计数",
    )
    parser.add_argument("--indent", type=int, default=2, help="输出 JSON 的缩进（0 表示单行）")
    parser.add_argument("--diagnose", action="store_true", help="失败时以 JSON 形式输出诊断信息")
    parser.add_argument("--verbose", action="store_true", help="在控制台输出调试日志")
    return parser


def _read_candidate(path: str, max_chars: int) -> str:
    if path == "-":
        text = sys.stdin.read(max_chars + 1)
    else:
        with Path(path).open(encoding="utf-8", errors="replace") as f:
            text = f.read(max_chars + 1)
    if len(text) > max_chars:
        raise ValueError(f"输入超过 {max_chars} 字符上限")
    return text


def _render_diagnostic(console: Console, diagnostic: ParseDiagnostic) -> None:
    console.print(
        Panel(
            Text(diagnostic.primary_message, style="bold red"),
            title=f"Failed to parse analysis result ({diagnostic.raw_length} characters)",
            border_style="red",
        )
    )
    for failure in diagnostic.failures:
        console.print(
            Text.assemble((f"  策略 {failure['index'] + 1} ({failure['name']}): ", "dim"), failure["message"])
        )
    console.print(Panel(Text(diagnostic.head), title="First characters", border_style="dim"))
    console.print(Panel(Text(diagnostic.tail), title="Last characters", border_style="dim"))
    if diagnostic.excerpt is not None:
        console.print(
            Panel(
                Text(diagnostic.excerpt),
                title=f"Position {diagnostic.position} (excerpt from {diagnostic.excerpt_start})",
                border_style="yellow",
            )
        )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = Config().with_overrides(
        strict_brackets=args.strict_brackets,
        console_log_level="DEBUG" if args.verbose else None,
    )
    config.setup_logging()

    try:
        raw = _read_candidate(args.path, config.max_input_chars)
    except (OSError, ValueError) as e:
        logging.error(f"读取候选文本失败: {e}")
        return EXIT_BAD_INPUT

    result = recover(raw, strict_brackets=config.strict_brackets)
    if result.ok:
        logging.debug(f"恢复成功，策略: {result.strategy_name}")
        indent = args.indent if args.indent > 0 else None
        sys.stdout.write(json.dumps(result.value, ensure_ascii=False, indent=indent))
        sys.stdout.write("\n")
        return EXIT_OK

    diagnostic = build_diagnostic(
        raw,
        result.error,
        window=config.diagnostic_window,
        preview_chars=config.diagnostic_preview_chars,
    )
    if args.diagnose:
        sys.stdout.write(diagnostic.to_json())
        sys.stdout.write("\n")
    else:
        _render_diagnostic(Console(stderr=True), diagnostic)
    return EXIT_UNRECOVERABLE


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.warning("程序被用户手动中断。")
        sys.exit(130)
