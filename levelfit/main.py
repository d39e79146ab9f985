"""Command-line entry point: run a game tick or show the player summary"""
import argparse
import asyncio
import logging
from typing import List, Optional

from levelfit.config import DATA_PATH, LOG_LEVEL, validate_config
from levelfit.services.game_service import GameService
from levelfit.storage.json_store import JsonFileStore
from levelfit.utils.datetime_helpers import SystemClock
from levelfit.utils.random_source import SeededRandom

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper())
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="levelfit", description="LevelFit progression engine")
    parser.add_argument("command", choices=["tick", "status"], help="tick: advance the game; status: show player")
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible randomness")
    return parser


async def main(argv: Optional[List[str]] = None) -> None:
    """Main application entry point"""
    args = build_parser().parse_args(argv)

    logger.info("Validating configuration...")
    validate_config()

    service = GameService(JsonFileStore(DATA_PATH), SystemClock(), SeededRandom(args.seed))

    if args.command == "tick":
        report = await service.tick()
        for title in report.unlocked_titles:
            print(f"🏆 Title unlocked: {title.title} ({title.rarity.value})")
        for debuff in report.applied_debuffs:
            print(f"💀 {debuff.description}")
        if report.daily_reset:
            print(f"📋 {len(report.new_daily_quests)} new daily quests")
        if report.urgent_quest:
            print(f"⚡ Urgent quest: {report.urgent_quest.name}")
        if report.screen_time_prompt:
            print("📱 Report today's screen time")
    else:
        status = await service.status()
        print(f"Level {status['level']} {status['title']} "
              f"({status['experience']}/{status['experience_to_next_level']} XP, "
              f"{status['stat_points']} stat points)")
        for name, value in status["stats"].items():
            effective = status["effective_stats"][name]
            suffix = f" ({effective})" if effective != value else ""
            print(f"  {name:<12} {value}{suffix}")
        print(f"  power level  {status['power_level']}")
        for line in status["debuffs"]:
            print(f"💀 {line}")
        for line in status["quests"]:
            print(f"📋 {line}")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
