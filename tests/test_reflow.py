#!/usr/bin/env python3
"""
リフロー（左詰め）のユニットテスト
"""

import sys
import os
import pytest

# プロジェクトルートをパスに追加
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from models.slot_models import Placement, is_valid_layout
from algorithms.reflow import reflow, remove_and_reflow


class TestReflow:
    """reflowのテスト"""

    def test_left_pack(self):
        """隙間を詰めて左から並べる"""
        assert reflow([Placement(1, 1, 1), Placement(2, 1, 3)]) == [Placement(1, 1, 0), Placement(2, 1, 1)]

    def test_keeps_relative_order(self):
        """開始カラム順を保持"""
        placements = [Placement(3, 1, 3), Placement(1, 2, 0), Placement(2, 1, 2)]
        assert reflow(placements) == [Placement(1, 2, 0), Placement(2, 1, 2), Placement(3, 1, 3)]

    def test_idempotent(self):
        """reflow(reflow(x)) == reflow(x)"""
        once = reflow([Placement(1, 2, 1), Placement(2, 1, 3)])
        assert reflow(once) == once
        assert is_valid_layout(once)

    def test_tie_break_by_id_order(self):
        """開始カラムが同じ場合はid_orderの順"""
        placements = [Placement(5, 1, 2), Placement(3, 1, 2)]
        assert reflow(placements) == [Placement(3, 1, 0), Placement(5, 1, 1)]
        assert reflow(placements, id_order=[5, 3]) == [Placement(5, 1, 0), Placement(3, 1, 1)]

    def test_empty(self):
        assert reflow([]) == []

    def test_overloaded(self):
        """容量超過のスロットはエラー"""
        with pytest.raises(ValueError):
            reflow([Placement(1, 3, 0), Placement(2, 2, 2)])
        with pytest.raises(ValueError):
            reflow([Placement(i, 1, 0) for i in range(5)])


class TestRemoveAndReflow:
    """削除後の左詰め"""

    def test_remove_middle(self):
        placements = [Placement(1, 1, 0), Placement(2, 1, 1), Placement(3, 2, 2)]
        assert remove_and_reflow(placements, 2) == [Placement(1, 1, 0), Placement(3, 2, 1)]

    def test_remove_missing(self):
        """存在しないIDでも左詰めのみ行う"""
        assert remove_and_reflow([Placement(1, 1, 2)], 9) == [Placement(1, 1, 0)]
