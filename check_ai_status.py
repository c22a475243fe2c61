import argparse
import json
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

from talentmatch.config import load_settings
from talentmatch.services.ai_augmentation import AIAugmentationService


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Prints the AI augmentation status and runs a smoke request.")
    parser.add_argument("--llm-provider", choices=["openai", "lmstudio", "ollama"], default=None)
    parser.add_argument("--llm-model", default=None)
    parser.add_argument("--source-skill", default="JavaScript")
    parser.add_argument("--target-skill", default="TypeScript")
    args = parser.parse_args(argv)

    settings = load_settings()
    if args.llm_provider:
        settings.llm_provider = args.llm_provider
    if args.llm_model:
        settings.llm_model = args.llm_model

    service = AIAugmentationService.from_settings(settings)
    status = service.get_status()

    print("--- STATUS ---")
    print(json.dumps(status, indent=2))
    if status["mock_mode"]:
        print("AI service is running in mock mode. Set OPENAI_API_KEY to enable real AI integration.")
    elif not status["is_available"]:
        print(f"Backend '{status['provider']}' not available: analyses will use local fallbacks.")

    print(f"\nSending test request ({args.source_skill} -> {args.target_skill})...")
    result = service.analyze_skill_transferability(
        args.source_skill,
        args.target_skill,
        f"Software developer with 3 years of {args.source_skill} experience",
    )

    print("\n--- RESPONSE ---")
    print(result.model_dump_json(indent=2))
    print("----------------")
    print("source: fallback heuristic" if result.from_fallback else "source: LLM backend")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
