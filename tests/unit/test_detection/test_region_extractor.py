"""
Unit tests for detection.region_extractor module.
"""
import numpy as np

from core.models import Region
from detection.region_extractor import RegionExtractor, extract_regions, flood_fill


class TestFloodFill:
    """Tests for flood_fill function."""

    def test_diagonal_connectivity(self):
        """Test 8-connected neighbors join one component."""
        cells = [
            [True, False, False],
            [False, True, False],
            [False, False, True],
        ]
        visited = [[False] * 3 for _ in range(3)]

        region = flood_fill(cells, visited, 0, 0)

        assert region == Region(x=0, y=0, width=3, height=3, area=3)
        assert visited[2][2]

    def test_marks_only_component(self):
        """Test cells of other components stay unvisited."""
        cells = [
            [True, False, True],
            [True, False, True],
        ]
        visited = [[False] * 3 for _ in range(2)]

        region = flood_fill(cells, visited, 0, 0)

        assert region.area == 2
        assert not visited[0][2]


class TestExtractRegions:
    """Tests for extract_regions function."""

    def test_empty_mask(self):
        """Test all-false mask gives no regions."""
        assert extract_regions(np.zeros((50, 50), dtype=bool)) == []

    def test_single_block(self):
        """Test a filled block reduces to its bounding box and pixel count."""
        mask = np.zeros((60, 60), dtype=bool)
        mask[10:40, 5:35] = True

        regions = extract_regions(mask)

        assert regions == [Region(x=5, y=10, width=30, height=30, area=900)]

    def test_min_area_filter(self):
        """Test regions below min_area are dropped."""
        mask = np.zeros((30, 30), dtype=bool)
        mask[0:10, 0:10] = True

        assert extract_regions(mask) == []
        assert len(extract_regions(mask, min_area=100)) == 1

    def test_sorted_by_area_descending(self):
        """Test larger regions come first."""
        mask = np.zeros((100, 100), dtype=bool)
        mask[0:20, 0:25] = True       # 500
        mask[50:90, 50:90] = True     # 1600

        regions = extract_regions(mask)

        assert [r.area for r in regions] == [1600, 500]

    def test_large_component_without_recursion(self):
        """Test a component far larger than the recursion limit."""
        mask = np.ones((300, 300), dtype=bool)

        regions = extract_regions(mask)

        assert len(regions) == 1
        assert regions[0].area == 90000

    def test_accepts_nested_lists(self):
        """Test plain list masks are accepted."""
        mask = [[True] * 25 for _ in range(20)]
        assert extract_regions(mask)[0].area == 500

    def test_ragged_mask(self):
        """Test malformed masks yield no regions."""
        assert extract_regions([[True, True], [True]]) == []

    def test_one_dimensional_mask(self):
        """Test non-2D input yields no regions."""
        assert extract_regions(np.ones(500, dtype=bool)) == []


class TestRegionExtractor:
    """Tests for RegionExtractor class."""

    def test_uses_configured_min_area(self):
        """Test min_area bound at construction."""
        mask = np.zeros((20, 20), dtype=bool)
        mask[0:5, 0:5] = True

        assert RegionExtractor().extract(mask) == []
        assert RegionExtractor(min_area=25).extract(mask)[0].area == 25
