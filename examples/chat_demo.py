"""Minimal demonstration of the chat and selection flows against a local Ollama."""

import asyncio

from assistant_core.api import service


class ConsoleDocument:
    def replace_selection(self, text):
        print("[replace selection]", text)

    def insert_runs(self, runs):
        print("[insert]", "".join(f"**{r.text}**" if r.bold else r.text for r in runs))


async def main():
    service.init_workspace(ConsoleDocument())
    print("Models:", await service.load_models())

    service.selection_changed("The quick brown fox jumps over the lazy dog.")
    await service.process_selection("summarize")

    question = "Explain the meaning of {{text}} in one sentence."
    reply = await service.send_chat(question)
    print("User:", question)
    print("Thinking:", reply["thinking"])
    print("Assistant:", "".join(run["text"] for run in reply["runs"]))


if __name__ == "__main__":
    asyncio.run(main())
