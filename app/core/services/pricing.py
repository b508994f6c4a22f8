"""
Purpose: Token math & cost estimation.
Central pricing logic so UI/controller do not duplicate calculations.
Only models that accept inline PDF input are listed.
"""

from ..models import Price


PRICE_TABLE = {
    "gpt-4o-mini": Price(0.15, 0.60),
    "gpt-4o": Price(2.50, 10.00),
    "gpt-4.1-mini": Price(0.40, 1.60),
    "gpt-4.1": Price(2.00, 8.00),
}


def estimate_cost(model: str, tokens_in: int, tokens_out: int) -> float:
    p = PRICE_TABLE.get(model, Price(0.0, 0.0))
    return (tokens_in / 1000000) * p.input_per_1M + (
        tokens_out / 1000000
    ) * p.output_per_1M


def usage_caption(model: str, tokens_in: int, tokens_out: int) -> str:
    cost = estimate_cost(model, tokens_in, tokens_out)
    return (
        f"Running on model: {model} · tokens in/out: {tokens_in}/{tokens_out}"
        f" · est. ${cost:.4f}"
    )
