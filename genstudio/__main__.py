"""
Entry point for running GenStudio as a module: ``python -m genstudio``

Main commands:
    1. Generate media:
        python -m genstudio image "a lighthouse at dawn"
        python -m genstudio batch "a lighthouse at dawn" --count 4
        python -m genstudio video "waves on rocks" --template epic-zoom --style smooth-elegant

    2. Manage providers and keys:
        python -m genstudio providers
        python -m genstudio keys set openai sk-...
        python -m genstudio keys remove openai

    3. Account:
        python -m genstudio usage
        python -m genstudio upgrade
        python -m genstudio limits add 20 --period monthly

    4. Templates and gallery:
        python -m genstudio templates --category motion
        python -m genstudio recommend "slow orbit around a glass sculpture"
        python -m genstudio gallery list
        python -m genstudio gallery export --output gallery.json
"""

import argparse
import sys

PERIOD_CHOICES = ["daily", "weekly", "monthly", "yearly"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genstudio",
        description="GenStudio – AI image and video generation across hosted providers",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to a studio YAML configuration file (or set GENSTUDIO_CONFIG)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ── image / batch / video ───────────────────────────────────────────
    image_parser = subparsers.add_parser("image", help="Generate one image")
    image_parser.add_argument("prompt", type=str, help="Text prompt")

    batch_parser = subparsers.add_parser("batch", help="Generate several images in sequence")
    batch_parser.add_argument("prompt", type=str, help="Text prompt")
    batch_parser.add_argument(
        "--count", "-n", type=int, default=4, help="Number of images (default: 4)"
    )

    video_parser = subparsers.add_parser("video", help="Generate one video (Pro)")
    video_parser.add_argument("prompt", type=str, help="Text prompt")
    video_parser.add_argument(
        "--template", "-t", type=str, default=None, help="Video template id"
    )
    video_parser.add_argument(
        "--style", "-s", type=str, default=None, help="Animation style id"
    )

    rb_parser = subparsers.add_parser(
        "remove-bg", help="Remove the background of a local image (Pro, Stability AI)"
    )
    rb_parser.add_argument("image", type=str, help="Path to the source image")

    # ── providers / keys ────────────────────────────────────────────────
    subparsers.add_parser("providers", help="List providers and their key status")

    keys_parser = subparsers.add_parser("keys", help="Manage stored API keys")
    keys_sub = keys_parser.add_subparsers(dest="keys_command")
    keys_set = keys_sub.add_parser("set", help="Store an API key")
    keys_set.add_argument("provider", type=str, help="Provider id (openai, stabilityai, ...)")
    keys_set.add_argument("key", type=str, help="API key")
    keys_remove = keys_sub.add_parser("remove", help="Remove a stored API key")
    keys_remove.add_argument("provider", type=str, help="Provider id")
    keys_sub.add_parser("list", help="Show masked keys")

    # ── account ─────────────────────────────────────────────────────────
    subparsers.add_parser("usage", help="Show subscription usage")
    subparsers.add_parser("upgrade", help="Switch to the Pro tier")

    limits_parser = subparsers.add_parser("limits", help="Manage spending limits")
    limits_sub = limits_parser.add_subparsers(dest="limits_command")
    limits_add = limits_sub.add_parser("add", help="Add a spending limit")
    limits_add.add_argument("amount", type=float, help="Limit amount in dollars")
    limits_add.add_argument(
        "--period", "-p", choices=PERIOD_CHOICES, default="monthly", help="Limit period"
    )
    limits_add.add_argument(
        "--no-block",
        action="store_true",
        help="Only warn; do not block charges above the limit",
    )
    limits_alert = limits_sub.add_parser("alert", help="Add a spending alert")
    limits_alert.add_argument("name", type=str, help="Alert name")
    limits_alert.add_argument(
        "--threshold", type=float, default=0.0, help="Absolute spend threshold"
    )
    limits_alert.add_argument(
        "--percentage", type=float, default=None, help="Percentage of the limit"
    )
    limits_alert.add_argument(
        "--limit-id", type=str, default=None, help="Attach to this limit (default: global)"
    )
    limits_sub.add_parser("list", help="List spending limits")
    limits_sub.add_parser("report", help="Spending per month and category")

    # ── templates / recommend ───────────────────────────────────────────
    tpl_parser = subparsers.add_parser("templates", help="List video templates and styles")
    tpl_parser.add_argument(
        "--category",
        type=str,
        default=None,
        choices=["motion", "transition", "effect", "storytelling"],
        help="Only show templates of this category",
    )

    rec_parser = subparsers.add_parser(
        "recommend", help="Recommend templates and styles for a video prompt"
    )
    rec_parser.add_argument("prompt", type=str, help="Video prompt")

    # ── gallery ─────────────────────────────────────────────────────────
    gallery_parser = subparsers.add_parser("gallery", help="Browse and export generated media")
    gallery_sub = gallery_parser.add_subparsers(dest="gallery_command")
    gallery_list = gallery_sub.add_parser("list", help="List gallery items")
    gallery_list.add_argument("--type", choices=["image", "video"], default=None)
    gallery_export = gallery_sub.add_parser("export", help="Export the gallery")
    gallery_export.add_argument(
        "--output", "-o", type=str, default="genstudio_gallery.json", help="Output path"
    )
    gallery_export.add_argument(
        "--format", "-f", choices=["json", "csv"], default="json", help="Output format"
    )
    gallery_save = gallery_sub.add_parser("save", help="Download an item to disk")
    gallery_save.add_argument("item_id", type=str, help="Gallery item id")
    gallery_save.add_argument(
        "--output-dir", "-o", type=str, default=None, help="Override the output directory"
    )
    gallery_remove = gallery_sub.add_parser("remove", help="Delete a gallery item")
    gallery_remove.add_argument("item_id", type=str, help="Gallery item id")

    return parser


def print_progress(update) -> None:
    print(f"  [{update.progress:3.0f}%] {update.stage}")


def _print_items(items) -> None:
    for item in items:
        url = item.url if not item.url.startswith("data:") else "<inline image data>"
        print(f"  ✓ {item.id}  {url}")


def _cmd_providers(studio) -> None:
    from genstudio.keys import PROVIDERS, get_configured_providers, provider_for_feature

    keys = studio.api_keys()
    print("\nProviders:")
    for status in get_configured_providers(keys):
        info = PROVIDERS[status.provider]
        mark = "✓" if status.is_configured else "·"
        print(f"  {mark} {status.provider:12s} {info.name:13s} {', '.join(info.features)}")
    print(
        f"\nImage provider: {provider_for_feature(keys, 'image') or 'none'}"
        f"\nVideo provider: {provider_for_feature(keys, 'video') or 'none'}"
    )


def _cmd_keys(studio, args) -> None:
    from genstudio.keys import PROVIDERS, mask_api_key

    if args.keys_command == "set":
        studio.set_api_key(args.provider, args.key)
    elif args.keys_command == "remove":
        studio.remove_api_key(args.provider)
    else:
        keys = studio.api_keys()
        for provider in PROVIDERS:
            value = keys.get(provider)
            print(f"  {provider:12s} {mask_api_key(value) if value else '(not set)'}")


def _cmd_usage(studio) -> None:
    usage = studio.usage_summary()
    limit = usage["generations_limit"]
    print(f"\nTier       : {usage['tier']}")
    print(f"Used       : {usage['generations_used']} / {limit if limit is not None else '∞'}")
    if usage["remaining"] is not None:
        print(f"Remaining  : {usage['remaining']} ({usage['usage_percentage']}% used)")
    print(f"Resets on  : {usage['reset_date']}")
    if usage["upgrade_suggested"]:
        print("\nRunning low on generations – `genstudio upgrade` for unlimited use.")


def _cmd_limits(studio, args) -> None:
    from genstudio.output.export import spending_report
    from genstudio.spending import format_period, period_days_remaining, spending_percentage

    if args.limits_command == "add":
        limit = studio.add_spending_limit(args.amount, args.period, not args.no_block)
        print(f"[Studio] Added {limit.period} limit {limit.id} of ${limit.amount:.2f}")
    elif args.limits_command == "alert":
        alert = studio.add_spending_alert(
            args.name, args.threshold, args.percentage, args.limit_id
        )
        print(f"[Studio] Added alert {alert.id} '{alert.name}'")
    elif args.limits_command == "report":
        report = spending_report(studio.spending().history)
        if report.empty:
            print("No completed transactions yet.")
        else:
            print(report.to_string(index=False))
    else:
        config = studio.spending()
        print(f"\nSpent this month: ${config.total_spend_this_month:.2f}")
        for limit in config.limits:
            pct = spending_percentage(limit.current_spend, limit.amount)
            print(
                f"  {limit.id}  {format_period(limit.period):8s} "
                f"${limit.current_spend:.2f} / ${limit.amount:.2f} ({pct}%) "
                f"– {period_days_remaining(limit.reset_date)} days left"
                f"{'' if limit.block_on_exceed else ' [warn only]'}"
            )


def _cmd_templates(studio, args) -> None:
    from genstudio.templates import ANIMATION_STYLES, VIDEO_TEMPLATES

    tier = studio.subscription().tier
    print("\nTemplates:")
    for t in VIDEO_TEMPLATES:
        if args.category and t.category != args.category:
            continue
        lock = " (Pro)" if t.pro_only and tier != "pro" else ""
        print(f"  {t.icon} {t.id:20s} {t.name}{lock} – {t.description} [{t.duration}]")
    if not args.category:
        print("\nStyles:")
        for s in ANIMATION_STYLES:
            lock = " (Pro)" if s.pro_only and tier != "pro" else ""
            print(f"  {s.id:20s} {s.name}{lock} – {s.description}")


def _cmd_recommend(studio, args) -> None:
    from genstudio.recommender import TemplateRecommender, recommendation_badge

    recommender = TemplateRecommender(
        api_key=studio.api_keys().openai, model_name=studio.config.recommender_model
    )
    result = recommender.recommend(args.prompt, studio.subscription().tier)
    a = result.analysis
    print(f"\nMood: {', '.join(a.mood)} | Motion: {', '.join(a.motion)} | "
          f"Category: {a.category} | Complexity: {a.complexity}")
    print("\nTemplates:")
    for rec in result.templates:
        print(f"  {rec.score:3.0f} [{recommendation_badge(rec.score)}] "
              f"{rec.template.id} – {rec.reasoning}")
    print("\nStyles:")
    for rec in result.styles:
        print(f"  {rec.score:3.0f} [{recommendation_badge(rec.score)}] "
              f"{rec.style.id} – {rec.reasoning}")


def _cmd_gallery(studio, args) -> None:
    from genstudio.media import save_media
    from genstudio.output.export import export_gallery_csv, export_gallery_json

    if args.gallery_command == "export":
        items = studio.gallery.list()
        if args.format == "csv":
            export_gallery_csv(items, args.output)
        else:
            export_gallery_json(items, args.output)
    elif args.gallery_command == "save":
        item = studio.gallery.get(args.item_id)
        path = save_media(
            item,
            args.output_dir or studio.config.output_dir,
            timeout=studio.config.request_timeout,
        )
        print(f"[GenStudio] Saved {item.id} to {path}")
    elif args.gallery_command == "remove":
        studio.gallery.remove(args.item_id)
        print(f"[GenStudio] Removed {args.item_id}")
    else:
        items = studio.gallery.list(getattr(args, "type", None))
        if not items:
            print("Gallery is empty.")
        for item in items:
            print(f"  {item.id}  {item.type:5s} {item.provider:12s} {item.prompt[:60]}")


def main(argv=None) -> int:
    from dotenv import load_dotenv

    load_dotenv()  # Load .env file (OPENAI_API_KEY, etc.)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    from genstudio.config import load_config
    from genstudio.studio import Studio, describe_error

    try:
        studio = Studio(load_config(args.config))

        if args.command in ("image", "batch"):
            count = args.count if args.command == "batch" else 1
            items = studio.generate(args.prompt, "image", count=count, on_progress=print_progress)
            _print_items(items)
        elif args.command == "video":
            items = studio.generate(
                args.prompt,
                "video",
                template_id=args.template,
                style_id=args.style,
                on_progress=print_progress,
            )
            _print_items(items)
        elif args.command == "remove-bg":
            _print_items([studio.remove_background(args.image, on_progress=print_progress)])
        elif args.command == "providers":
            _cmd_providers(studio)
        elif args.command == "keys":
            _cmd_keys(studio, args)
        elif args.command == "usage":
            _cmd_usage(studio)
        elif args.command == "upgrade":
            studio.upgrade()
        elif args.command == "limits":
            _cmd_limits(studio, args)
        elif args.command == "templates":
            _cmd_templates(studio, args)
        elif args.command == "recommend":
            _cmd_recommend(studio, args)
        elif args.command == "gallery":
            _cmd_gallery(studio, args)

    except Exception as e:
        print(f"✗ {describe_error(e)}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
