import asyncio

from llm_bridge import AdapterKind, Client

KINDS = (
    AdapterKind.OPENAI,
    AdapterKind.ANTHROPIC,
    AdapterKind.GEMINI,
    AdapterKind.COHERE,
    AdapterKind.GROQ,
    AdapterKind.DEEPSEEK,
    AdapterKind.XAI,
)


async def main() -> None:
    async with Client() as client:
        for kind in KINDS:
            models = await client.list_models(kind)
            print(f"\n{kind}: {len(models)} model(s)")
            for model in models:
                features = [
                    label
                    for label, on in (
                        ("tools", model.supports_tool_calls),
                        ("stream", model.supports_streaming),
                        ("json", model.supports_json_mode),
                        ("reasoning", model.supports_reasoning),
                        ("multimodal", model.is_multimodal()),
                    )
                    if on
                ]
                print(f"  {model.id}: in={model.max_input_tokens} out={model.max_output_tokens} [{', '.join(features)}]")


if __name__ == "__main__":
    asyncio.run(main())
