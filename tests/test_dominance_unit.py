"""
Unit tests for dominance weighting.
"""
import pytest

from aura_engine.services.colors.dominance import DominanceEstimator
from aura_engine.services.colors.palette import RED, GREEN, BLUE


class TestRankWeighting:
    """Test the default rank-based percentages"""
    
    def test_single_color(self):
        assert DominanceEstimator().weight([RED]) == [100.0]
    
    def test_two_colors(self):
        assert DominanceEstimator().weight([RED, BLUE]) == pytest.approx([66.6667, 33.3333], abs=1e-3)
    
    def test_three_colors(self):
        percentages = DominanceEstimator().weight([RED, GREEN, BLUE])
        assert percentages == pytest.approx([50.0, 33.33, 16.67], abs=0.01)
    
    @pytest.mark.parametrize("entries", [[RED], [RED, GREEN], [RED, GREEN, BLUE], [RED, RED, RED]])
    def test_sums_to_100_and_non_increasing(self, entries):
        percentages = DominanceEstimator().weight(entries)
        assert sum(percentages) == pytest.approx(100.0, abs=0.01)
        assert all(a >= b for a, b in zip(percentages, percentages[1:]))
    
    def test_empty_input(self):
        assert DominanceEstimator().weight([]) == []
    
    def test_rank_ignores_populations(self):
        percentages = DominanceEstimator("rank").weight([RED, BLUE], populations=[1, 99])
        assert percentages[0] > percentages[1]


class TestPopulationWeighting:
    """Test population-based percentages"""
    
    def test_proportional_to_counts(self):
        percentages = DominanceEstimator("population").weight([RED, GREEN, BLUE], [600, 300, 100])
        assert percentages == pytest.approx([60.0, 30.0, 10.0])
    
    def test_clamped_to_non_increasing(self):
        percentages = DominanceEstimator("population").weight([RED, GREEN, BLUE], [100, 300, 600])
        assert percentages == pytest.approx([100 / 3] * 3)
    
    def test_falls_back_to_rank_without_counts(self):
        percentages = DominanceEstimator("population").weight([RED, GREEN])
        assert percentages == pytest.approx([66.6667, 33.3333], abs=1e-3)
    
    def test_mismatched_counts_rejected(self):
        with pytest.raises(ValueError):
            DominanceEstimator("population").weight([RED, GREEN], [1, 2, 3])
    
    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            DominanceEstimator("area")
