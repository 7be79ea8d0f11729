"""Entry point: open the game page, build the agent, serve the control API."""

import argparse
import asyncio
import sys

import uvicorn
from playwright.async_api import async_playwright

from mobbot.adapters.playwright_dom import PlaywrightDomProbe
from mobbot.agent import ScannerAgent
from mobbot.app import create_app
from mobbot.config import CONFIG


def _log(msg: str):
    print(msg, file=sys.stderr)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="Mobsteria automation agent")
    parser.add_argument("--url", default=CONFIG["game_url"], help="Game page to open")
    parser.add_argument("--port", type=int, default=CONFIG["control_port"], help="Control API port")
    parser.add_argument("--headless", action="store_true", help="Run the browser headless")
    parser.add_argument("--user-data-dir", default="", help="Persistent browser profile (keeps login)")
    return parser.parse_args(argv)


async def run(args):
    if not CONFIG["auth_token"]:
        _log("[mobbot] MOBBOT_AUTH_TOKEN is not set; API calls will be rejected")

    async with async_playwright() as pw:
        if args.user_data_dir:
            context = await pw.chromium.launch_persistent_context(args.user_data_dir, headless=args.headless)
            page = context.pages[0] if context.pages else await context.new_page()
        else:
            browser = await pw.chromium.launch(headless=args.headless)
            context = await browser.new_context()
            page = await context.new_page()
        await page.goto(args.url)
        _log(f"[mobbot] opened {args.url}")

        agent = ScannerAgent(PlaywrightDomProbe(page))
        server = uvicorn.Server(
            uvicorn.Config(create_app(agent), host="127.0.0.1", port=args.port, log_level="info")
        )
        try:
            await server.serve()
        finally:
            await agent.destroy()
            await context.close()


def main(argv=None):
    args = parse_arguments(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        _log("[mobbot] interrupted")


if __name__ == "__main__":
    main()
