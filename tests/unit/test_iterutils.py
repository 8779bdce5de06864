import random
from collections import Counter

import pytest
from datahelpers import shuffle, split, traverse


class TestShuffle:

    def test_same_multiset(self):
        """Every element is yielded exactly once"""
        items = [1, 2, 2, 3, 5, 8, 13]
        result = list(shuffle(items, random.Random(7)))
        assert Counter(result) == Counter(items)

    def test_source_not_mutated(self):
        items = list(range(10))
        list(shuffle(items, random.Random(1)))
        assert items == list(range(10))

    def test_deterministic_with_seed(self):
        a = list(shuffle(range(20), random.Random(42)))
        b = list(shuffle(range(20), random.Random(42)))
        assert a == b

    def test_lazy(self):
        """Elements are produced on demand"""
        gen = shuffle([1, 2, 3])
        assert next(gen) in {1, 2, 3}

    def test_empty(self):
        assert list(shuffle([])) == []

    def test_every_permutation_reachable(self):
        rnd = random.Random(0)
        seen = {tuple(shuffle('abc', rnd)) for _ in range(300)}
        assert len(seen) == 6


class TestTraverse:

    tree = {
        'a': ['a1', 'a2'],
        'b': ['b1'],
        'a1': ['a1x'],
    }

    def children(self, node):
        return self.tree.get(node, [])

    def test_visit_order(self):
        """Last root first; children are stacked and popped last-in-first-out"""
        assert list(traverse(['a', 'b'], self.children)) == ['b', 'b1', 'a', 'a2', 'a1', 'a1x']

    def test_each_node_once(self):
        result = list(traverse(['a', 'b'], self.children))
        assert sorted(result) == sorted(['a', 'a1', 'a2', 'a1x', 'b', 'b1'])

    def test_leaves_only(self):
        assert list(traverse([1, 2, 3], lambda n: [])) == [3, 2, 1]

    def test_empty(self):
        assert list(traverse([], self.children)) == []


class TestSplit:

    def test_nearly_equal_chunks(self):
        assert split([1, 2, 3, 4, 5], 2) == [[1, 2, 3], [4, 5]]

    @pytest.mark.parametrize(('count', 'group_by'), [
        (10, 3), (10, 4), (7, 7), (3, 5), (1, 1), (100, 9),
    ])
    def test_chunk_invariants(self, count, group_by):
        """Concatenation restores the input; at most group_by chunks"""
        items = list(range(count))
        chunks = split(items, group_by)
        assert [x for chunk in chunks for x in chunk] == items
        assert 1 <= len(chunks) <= group_by
        assert all(chunks)

    def test_fewer_items_than_groups(self):
        assert split([1, 2, 3], 5) == [[1], [2], [3]]

    def test_uneven_fill(self):
        """Chunk size rounds up, so fewer chunks than groups can result"""
        assert split(range(10), 4) == [[0, 1, 2], [3, 4, 5], [6, 7, 8], [9]]
        assert split(range(6), 4) == [[0, 1], [2, 3], [4, 5]]

    def test_empty(self):
        assert split([], 3) == []

    @pytest.mark.parametrize('group_by', [0, -1])
    def test_invalid_group_by(self, group_by):
        with pytest.raises(ValueError):
            split([1, 2], group_by)


if __name__ == '__main__':
    __import__('pytest').main([__file__])
