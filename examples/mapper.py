import asyncio

from llm_bridge import ChatMessage, ChatOptions, ChatRequest, Client, ClientConfig, ModelIden, StreamChunk, StreamEnd

MODEL = "gpt-4o"  # mapped to gpt-4o-mini below


def economical(model_iden: ModelIden) -> ModelIden | None:
    if model_iden.model_name.startswith("gpt-"):
        return model_iden.with_name("gpt-4o-mini")
    return None


async def main() -> None:
    config = ClientConfig.from_env().with_model_mapper(economical)
    async with Client(config) as client:
        chat_req = ChatRequest(system="Answer in one sentence")
        for question in ("Why is the sky blue?", "Why is it red sometimes?"):
            chat_req = chat_req.append_message(ChatMessage.user(question))
            print(f"\n--- Question:\n{question}")

            stream = client.open_chat_stream(MODEL, chat_req, ChatOptions(capture_content=True))
            print(f"--- Answer ({stream.model_iden}):")
            answer = ""
            async with stream:
                async for event in stream:
                    if isinstance(event, StreamChunk):
                        print(event.content, end="", flush=True)
                    elif isinstance(event, StreamEnd):
                        answer = event.captured_text_content or ""
            print()
            chat_req = chat_req.append_message(ChatMessage.assistant(answer))


if __name__ == "__main__":
    asyncio.run(main())
