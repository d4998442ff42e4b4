"""
Memory Flood: Stress-Driven Expansion
=====================================

WHAT THIS SHOWS:
- Driving the engine from the asyncio timer loop
- The stress flag flooding slots until pressure forces expansions
- Switching to training mode to watch synthetic distillation loss
- Manual operations between ticks (flush, chat, emotion override)

RUN:
    python -m examples.memory_flood.run
"""

import asyncio
import random

from brainpmm import (
    BrainConfig,
    EmotionComponent,
    PMMEngine,
    SimulationRunner,
    TickMode,
    mood_label,
)


async def main() -> None:
    config = BrainConfig(start_mem_slots=16, max_mem_slots=256, expansion_threshold=0.6)
    runner = SimulationRunner(
        config,
        engine=PMMEngine(rng=random.Random(42)),
        tick_intervals={TickMode.INFERENCE: 0.05, TickMode.TRAINING: 0.02},
        verbose=True,
    )

    # Phase 1: flood memory until it expands a few times
    runner.set_stress(True)
    await runner.run(num_ticks=25)
    runner.set_stress(False)

    print("\nChat:")
    for text in ("status", "who are you?"):
        runner.send_message(text)
        print(f"  > {text}\n  < {runner.state.chat_history[-1].text}")

    # Phase 2: flush the hottest slots and calm the module down
    hottest = sorted(
        range(runner.state.memory_capacity),
        key=lambda i: runner.state.memory_slots[i],
        reverse=True,
    )[:8]
    runner.flush_slots(hottest)
    runner.override_emotion(EmotionComponent.AROUSAL, -0.8)
    print(f"\nMood after override: {mood_label(runner.state.emotion_vector).value}")

    # Phase 3: distillation telemetry
    runner.set_mode(TickMode.TRAINING)
    await runner.run(num_ticks=20)

    print("\nDashboard log:")
    for line in runner.state.logs:
        print(f"  {line}")


if __name__ == "__main__":
    asyncio.run(main())
