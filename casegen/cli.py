import argparse
import json
import sys

from dotenv import load_dotenv

from .cad.assemblies import create_case
from .config import CaseConfiguration, Settings, segments_for_quality
from .errors import CaseGenError
from .logging_config import setup_logging
from .pipeline import run_case_pipeline
from .standards import StandardsCatalog, get_catalog
from .utils import read_json

load_dotenv()


def _load_config(args, settings):
    data = read_json(args.config) if args.config else {}
    overrides = {
        "width": args.width,
        "height": args.height,
        "depth": args.depth,
        "material": args.material,
        "motherboard_form_factor": args.form_factor,
        "rear_fan": args.rear_fan,
        "front_panel": args.front_panel,
        "side_panel": args.side_panel,
        "top_panel": args.top_panel,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    quality = args.quality or settings.quality
    if quality:
        data["segments"] = segments_for_quality(quality)
    return CaseConfiguration.from_dict(data)


def _catalog(settings):
    if not settings.standards_dir:
        return None
    catalog = StandardsCatalog(settings.standards_dir)
    catalog.load()
    return catalog


def cmd_generate(args, settings):
    config = _load_config(args, settings)
    outputs = run_case_pipeline(
        config, args.output or settings.output_dir, catalog=_catalog(settings), include_mesh=args.mesh
    )
    for key in ["stl", "anchors", "dxf", "report", "mesh"]:
        if key in outputs:
            print(outputs[key])


def cmd_anchors(args, settings):
    config = _load_config(args, settings)
    case = create_case(config, _catalog(settings))
    anchors = case.anchors.namespace(args.prefix) if args.prefix else case.anchors
    print(json.dumps({name: list(p) for name, p in anchors.items()}, indent=2))


def cmd_standards(args, settings):
    catalog = _catalog(settings) or get_catalog()
    print(catalog.summary())


def build_parser():
    parser = argparse.ArgumentParser(prog="casegen")
    parser.add_argument("--log-level", dest="log_level", help="Log level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-file", dest="log_file", help="Also write logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_case_options(p):
        p.add_argument("config", nargs="?", help="Case configuration JSON")
        p.add_argument("--width", type=float)
        p.add_argument("--height", type=float)
        p.add_argument("--depth", type=float)
        p.add_argument("--material")
        p.add_argument("--form-factor", dest="form_factor", help="ATX, microATX or miniITX")
        p.add_argument("--rear-fan", dest="rear_fan", help="Fan key, e.g. fan120mm")
        p.add_argument("--front-panel", dest="front_panel", choices=["solid", "mesh", "window"])
        p.add_argument("--side-panel", dest="side_panel", choices=["solid", "mesh", "window"])
        p.add_argument("--top-panel", dest="top_panel", choices=["solid", "mesh", "window"])
        p.add_argument("--quality", choices=["low", "medium", "high"])

    generate_p = sub.add_parser("generate", help="Generate case.stl, anchors.json, panels.dxf and report.json")
    add_case_options(generate_p)
    generate_p.add_argument("-o", "--output", help="Output directory")
    generate_p.add_argument("--mesh", action="store_true", help="Also write mesh.json buffer data")
    generate_p.set_defaults(func=cmd_generate)

    anchors_p = sub.add_parser("anchors", help="Print case anchors as JSON")
    add_case_options(anchors_p)
    anchors_p.add_argument("--prefix", help="Only anchors under this path, e.g. panels.front")
    anchors_p.set_defaults(func=cmd_anchors)

    standards_p = sub.add_parser("standards", help="List form factors, materials and fans")
    standards_p.set_defaults(func=cmd_standards)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    try:
        setup_logging(args.log_level or settings.log_level, args.log_file)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    try:
        args.func(args, settings)
    except CaseGenError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
