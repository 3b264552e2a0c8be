"""Entry point for the headless bot client."""

from __future__ import annotations

import argparse
import asyncio
import logging

from .entities import EntityStore
from .input import BotController
from .network import NetworkClient


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a Thugs.io bot against a server")
    parser.add_argument("--host", default="127.0.0.1", help="Server host")
    parser.add_argument("--port", type=int, default=3000, help="Server port")
    parser.add_argument("--duration", type=float, default=60.0, help="Seconds to play")
    parser.add_argument("--fire-interval", type=float, default=0.5, help="Seconds between shots")
    return parser.parse_args()


async def run_bot(args: argparse.Namespace) -> EntityStore:
    network = NetworkClient(f"ws://{args.host}:{args.port}")
    store = EntityStore()
    store.apply(await network.connect())
    logging.info("Connected as %s", store.local_id)
    await network.send_chat("bot online")

    controller = BotController()
    loop = asyncio.get_running_loop()
    deadline = loop.time() + args.duration
    last_shot = 0.0
    running = True

    while running and loop.time() < deadline:
        for event in network.pending_events():
            if event.get("type") == "disconnect":
                running = False
                break
            store.apply(event)

        state = controller.update(store)
        if state is not None:
            await network.send_move(state.x, state.y, state.angle, state.speed)
            if state.fire and loop.time() - last_shot >= args.fire_interval:
                await network.send_shoot(state.angle)
                last_shot = loop.time()
        await asyncio.sleep(1 / 30)

    await network.close()
    me = store.local_player
    if me is not None:
        logging.info("Finished: kills=%d deaths=%d money=%d", me.kills, me.deaths, me.money)
    return store


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    asyncio.run(run_bot(parse_args()))


if __name__ == "__main__":
    main()
