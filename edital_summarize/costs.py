"""Cost estimation utilities for API calls."""

import tiktoken

from .summarize.batch import BATCH_SIZE
from .summarize.client import BATCH_SUMMARY_MAX_TOKENS, OVERALL_SUMMARY_MAX_TOKENS
from .summarize.prompts import CHUNK_PREVIEW_CHARS

# Approximate costs per 1M tokens on OpenRouter (input/output)
# These are estimates - actual costs may vary
MODEL_COSTS = {
    "deepseek/deepseek-r1": {"input": 0.55, "output": 2.19},
    "deepseek/deepseek-chat": {"input": 0.27, "output": 1.10},
    "openai/gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "openai/gpt-4o": {"input": 2.50, "output": 10.00},
}
DEFAULT_COSTS = MODEL_COSTS["deepseek/deepseek-r1"]

# Prompt instructions around the source text
PROMPT_OVERHEAD_TOKENS = 400
# Digest line per section in the overall summary prompt
DIGEST_LINE_TOKENS = 40

# Thresholds for warnings
WARN_DOCUMENT_TOKENS = 100_000
WARN_ESTIMATED_COST = 0.50  # $0.50 threshold for warning


def count_tokens(text: str) -> int:
    """Count tokens in text using tiktoken."""
    enc = tiktoken.get_encoding("cl100k_base")
    return len(enc.encode(text))


def estimate_processing_cost(
    chunk_contents: list[str],
    model: str = "deepseek/deepseek-r1",
) -> dict:
    """
    Estimate cost for summarizing a chunked document.

    Output tokens are taken at their per-task ceiling, so the estimate is an
    upper bound on output.

    Returns dict with:
        - num_batches: number of batch summary calls
        - estimated_input_tokens: total input tokens (truncated chunks + prompts)
        - estimated_output_tokens: output token ceiling
        - estimated_cost: cost in USD
        - should_warn: whether to show warning
    """
    costs = MODEL_COSTS.get(model, DEFAULT_COSTS)

    num_batches = max(1, (len(chunk_contents) + BATCH_SIZE - 1) // BATCH_SIZE)

    # Batch phase: truncated chunks + prompt per batch
    chunk_tokens = sum(count_tokens(content[:CHUNK_PREVIEW_CHARS]) for content in chunk_contents)
    batch_input = chunk_tokens + num_batches * PROMPT_OVERHEAD_TOKENS

    # Overall phase: digest of sections + prompt
    overall_input = len(chunk_contents) * DIGEST_LINE_TOKENS + PROMPT_OVERHEAD_TOKENS

    total_input = batch_input + overall_input
    total_output = num_batches * BATCH_SUMMARY_MAX_TOKENS + OVERALL_SUMMARY_MAX_TOKENS

    input_cost = (total_input / 1_000_000) * costs["input"]
    output_cost = (total_output / 1_000_000) * costs["output"]
    total_cost = input_cost + output_cost

    document_tokens = sum(count_tokens(content) for content in chunk_contents)

    return {
        "num_batches": num_batches,
        "estimated_input_tokens": total_input,
        "estimated_output_tokens": total_output,
        "estimated_cost": total_cost,
        "should_warn": document_tokens > WARN_DOCUMENT_TOKENS or total_cost > WARN_ESTIMATED_COST,
    }


def format_cost_warning(
    operation: str,
    estimated_cost: float,
    details: str = "",
) -> str:
    """Format a cost warning message."""
    msg = f"⚠️  {operation} may cost approximately ${estimated_cost:.3f}"
    if details:
        msg += f"\n   {details}"
    return msg
