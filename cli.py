import argparse
import json
import logging
import sys

from framez_page_builder.core.exceptions import FramezError
from framez_page_builder.packaging.card_deck_packager import read_package
from framez_page_builder.pipeline import CoursePageBuilder
from framez_page_builder.validation import validate_flashcards


def main():
    parser = argparse.ArgumentParser(description="Framez page builder CLI")
    parser.add_argument("--render", type=str, metavar="FILE", help="Render a markdown file to sanitized HTML")
    parser.add_argument("--package", type=str, metavar="CARDS_JSON", help="Build a card deck package from a JSON list of {question, answer}")
    parser.add_argument("--title", type=str, default="", help="Title of the card deck package")
    parser.add_argument("--build-page", action="store_true", help="Fetch a session from the API and create or update its course page")
    parser.add_argument("--course-id", type=str, help="Course ID (with --build-page)")
    parser.add_argument("--namespace-id", type=str, help="Session namespace ID (with --build-page)")
    parser.add_argument("-o", "--output", type=str, help="Output file (HTML for --render, package for --package)")
    parser.add_argument("-c", "--config", type=str, help="Path to a YAML or JSON configuration file")
    parser.add_argument("--log", type=str, default="INFO", help="Log level (DEBUG, INFO, WARNING, ERROR) or a .log file path")
    args = parser.parse_args()

    # A .log path writes to that file as well as the console
    if args.log and args.log.lower().endswith('.log'):
        logging.basicConfig(
            level=logging.INFO,
            format="%(levelname)s:%(name)s:%(message)s",
            handlers=[
                logging.FileHandler(args.log, mode='w', encoding='utf-8'),
                logging.StreamHandler()
            ]
        )
    else:
        logging.basicConfig(level=getattr(logging, args.log.upper(), logging.INFO))

    builder = CoursePageBuilder(config_path=args.config)

    try:
        if args.render:
            with open(args.render, "r", encoding="utf-8") as f:
                markdown_content = f.read()

            html = builder.renderer.render(markdown_content)
            if args.output:
                with open(args.output, "w", encoding="utf-8") as f:
                    f.write(html)
                print(f"Rendered HTML saved to {args.output}")
            else:
                print(html)
            return 0

        if args.package:
            with open(args.package, "r", encoding="utf-8") as f:
                cards = validate_flashcards(json.load(f), builder.sanitizer)
            if not cards:
                print("No cards found; nothing to package")
                return 0

            package = builder.packager.build_package(cards, args.title)
            output = args.output or package.filename
            with open(output, "wb") as f:
                f.write(package.archive_bytes)

            _, content = read_package(
                package.archive_bytes,
                builder.config.packaging.manifest_entry,
                builder.config.packaging.content_entry
            )
            print(f"Package with {len(content['dialogs'])} cards saved to {output}")
            return 0

        if args.build_page:
            if not args.course_id or not args.namespace_id:
                parser.error("--build-page requires --course-id and --namespace-id")

            result = builder.create_course_page(args.course_id, args.namespace_id)
            print(json.dumps({
                "pageid": result.page_id,
                "action": result.action,
                "package": result.package.filename if result.package else None,
                "warnings": result.warnings
            }, indent=2))
            return 0

    except FramezError as e:
        logging.getLogger(__name__).error(str(e))
        return 1

    print("Error: specify --render, --package or --build-page")
    return 2


if __name__ == "__main__":
    sys.exit(main())
