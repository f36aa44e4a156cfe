#!/usr/bin/env python3
"""Unit tests for MapService snapshot handling."""
import threading

import numpy as np
import pytest

from drobot_exploration.map_service import MapService
from drobot_exploration.types import FrontierMap, MapInfo


def grid_with_unknown_half(width=10, height=6):
    """Left half free, right half unknown."""
    data = np.zeros((height, width), dtype=np.int16)
    data[:, width // 2:] = -1
    return MapInfo(data=data, resolution=1.0, width=width, height=height)


# ==================== Tests ====================

class TestNewMapFlag:
    def test_initially_no_map(self, map_service):
        assert map_service.has_new_map() is False
        assert len(map_service.frontier_map) == 0

    def test_consume_once(self, map_service, two_frontiers):
        map_service.update_frontiers(two_frontiers)
        assert map_service.has_new_map() is True
        map_service.mark_consumed()
        assert map_service.has_new_map() is False
        assert map_service.has_new_map() is False

    def test_flag_set_again_by_next_snapshot(self, map_service, two_frontiers):
        map_service.update_frontiers(two_frontiers)
        map_service.mark_consumed()
        map_service.update_frontiers(FrontierMap())
        assert map_service.has_new_map() is True
        assert map_service.maps_received == 2


class TestSnapshot:
    def test_snapshot_replaced_wholesale(self, map_service, two_frontiers):
        first = FrontierMap.from_points([[(0.0, 0.0)]])
        map_service.update_frontiers(first)
        map_service.update_frontiers(two_frontiers)
        assert map_service.frontier_map is two_frontiers

    def test_snapshot_is_immutable(self, two_frontiers):
        with pytest.raises(AttributeError):
            two_frontiers.frontiers = ()
        with pytest.raises(TypeError):
            two_frontiers.frontiers[0].points[0] = (1.0, 1.0)

    def test_callback_receives_snapshot(self, map_service, two_frontiers):
        received = []
        map_service.subscribe_map('/map', received.append)
        map_service.update_frontiers(two_frontiers)
        assert received == [two_frontiers]
        assert map_service.map_topic == '/map'

    def test_flag_raised_after_callbacks(self, map_service, two_frontiers):
        seen_flag = []
        map_service.subscribe_map('/map', lambda fmap: seen_flag.append(map_service.has_new_map()))
        map_service.update_frontiers(two_frontiers)
        assert seen_flag == [False]
        assert map_service.has_new_map() is True

    def test_concurrent_readers_see_whole_snapshots(self, map_service):
        snapshots = [
            FrontierMap.from_points([[(float(i), 0.0)] * (i + 1)] * (i + 1)) for i in range(20)
        ]
        errors = []

        def reader():
            for _ in range(2000):
                fmap = map_service.frontier_map
                sizes = {f.size for f in fmap}
                # Every snapshot i has i+1 frontiers of size i+1
                if fmap.frontiers and sizes != {len(fmap)}:
                    errors.append(fmap)

        def writer():
            for snapshot in snapshots * 50:
                map_service.update_frontiers(snapshot)

        threads = [threading.Thread(target=reader) for _ in range(3)]
        threads.append(threading.Thread(target=writer))
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []


class TestGridUpdates:
    def test_update_map_detects_frontiers(self, map_service):
        frontier_map = map_service.update_map(grid_with_unknown_half())
        assert len(frontier_map) == 1
        assert map_service.has_new_map() is True
        assert map_service.frontier_map is frontier_map

    def test_costmap_filters_lethal_cells(self, map_service):
        grid = grid_with_unknown_half()
        costmap = MapInfo(
            data=np.full((grid.height, grid.width), 100, dtype=np.int16),
            resolution=1.0, width=grid.width, height=grid.height,
        )
        map_service.subscribe_costmap('/costmap')
        map_service.update_costmap(costmap)
        assert map_service.costmap is costmap
        assert len(map_service.update_map(grid)) == 0
