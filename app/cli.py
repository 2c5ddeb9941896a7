import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app.backend.process import process_file, write_json_output
from sheetstream.config import get_settings
from sheetstream.logger import set_level


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract the target sheets of a large .xlsx workbook as tables."
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to the .xlsx workbook.",
    )
    parser.add_argument(
        "--sheets",
        nargs="+",
        default=None,
        help="Sheet names to extract (exact, case-sensitive). Defaults to TARGET_SHEET_NAMES.",
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory to write the output JSON (and CSV files with --csv).",
    )
    parser.add_argument(
        "--output-json-name",
        default=None,
        help="Output JSON filename (default: result.json, or env OUTPUT_JSON_NAME).",
    )
    parser.add_argument(
        "--output-json-timestamp",
        action="store_true",
        help="Append timestamp to JSON output filename (overrides default name).",
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="Also write every extracted sheet as <sheet name>.csv.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def print_summary(result: Dict[str, Any]) -> None:
    outcomes = result.get("outcomes", {})
    for name, outcome in outcomes.items():
        status = outcome.get("status")
        if status == "found":
            table = outcome.get("table") or {}
            print(f"[found] {name}: {len(table.get('header', []))} columns, {len(table.get('rows', []))} rows")
        elif status == "failed":
            print(f"[failed] {name}: {outcome.get('error_type')}: {outcome.get('error')}")
        else:
            print(f"[missing] {name}")
    for name in result.get("pending", []):
        print(f"[skipped] {name}")
    print("status:", result.get("status"))
    if result.get("has_failures"):
        failed = [name for name, outcome in outcomes.items() if outcome.get("status") == "failed"]
        print("failures:", ", ".join(failed))


def exit_code(result: Dict[str, Any]) -> int:
    """
    0: 全部正常（允许部分目标缺失）；1: 打开失败或没有任何目标工作表；
    2: 至少一个目标工作表存在但提取失败。
    """
    if "error" in result:
        return 1
    if result.get("has_failures"):
        return 2
    return 0 if result.get("status") != "none_found" else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    set_level(logging.DEBUG if args.verbose else get_settings().LOG_LEVEL)

    input_path = Path(args.input).expanduser()
    if not input_path.is_file():
        print(f"[error] input not found: {args.input}")
        return 1

    result = process_file(
        str(input_path),
        targets=args.sheets,
        csv_dir=args.output_dir if args.csv else None,
    )

    output_json_name = args.output_json_name
    if args.output_json_timestamp and not output_json_name:
        output_json_name = f"result_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

    json_path = write_json_output(result, args.output_dir, output_filename=output_json_name)
    print("JSON:", json_path)

    if "error" in result:
        print(f"[error] {result.get('error_type')}: {result['error']}")
        return 1

    print_summary(result)
    for csv_path in result.get("csv_files", []):
        print("CSV:", csv_path)
    return exit_code(result)


if __name__ == "__main__":
    raise SystemExit(main())
