"""
Dominance weighting for classified colors.

The default "rank" strategy scores the color at position i of N as N - i and
normalizes to 100: [100], [66.67, 33.33], [50, 33.33, 16.67]. It reflects only
ordinal rank, not how many samples each cluster held. The "population"
strategy weights by cluster sample counts instead.
"""
from typing import List, Optional, Sequence

from loguru import logger


STRATEGIES = ("rank", "population")


class DominanceEstimator:
    """Turns an ordered list of classified colors into percentages."""
    
    def __init__(self, strategy: str = "rank"):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown dominance strategy: {strategy}")
        self.strategy = strategy
    
    def weight(self, classified_in_order: Sequence,
               populations: Optional[Sequence[int]] = None) -> List[float]:
        """
        Assign percentages parallel to the input order.
        
        Args:
            classified_in_order: Palette entries (or anything) in dominance order
            populations: Cluster sample counts, required for "population"
            
        Returns:
            Percentages summing to 100, non-increasing with rank; empty for empty input
        """
        n = len(classified_in_order)
        if n == 0:
            return []
        
        if self.strategy == "population" and populations is not None and sum(populations) > 0:
            if len(populations) != n:
                raise ValueError("populations must be parallel to the classified colors")
            raw = [float(p) for p in populations]
            # Keep the contract of non-increasing shares by rank
            for i in range(1, n):
                raw[i] = min(raw[i], raw[i - 1])
        else:
            raw = [float(n - i) for i in range(n)]
        
        total = sum(raw)
        percentages = [r / total * 100.0 for r in raw]
        logger.debug(f"Dominance ({self.strategy}): {[round(p, 2) for p in percentages]}")
        return percentages
