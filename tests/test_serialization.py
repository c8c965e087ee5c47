# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for Data/Tags/Children conversion."""

import json

import pytest

from genro_nodetree import (
    DataTypeError,
    DeserializationError,
    Node,
    NodeTreeError,
    as_dict,
    load_dict,
    load_json,
    new_node,
    to_json,
)


def _shape(node):
    """Return (tags, data, children shapes) for structural comparison."""
    return (
        node.tags,
        node.data if node.has_data else '<none>',
        [_shape(kid) for kid in node],
    )


@pytest.fixture
def document_tree():
    """A three-level tree with mixed payload types."""
    root = new_node('doc', data={'version': 2})
    head = root.new_child('head')
    head.new_child('title', data='Hello')
    head.new_child('meta', data=None)
    body = root.new_child('body', data=[1, 2, 3])
    section = body.new_child('section', 'main')
    section.new_child('p', data=3.5)
    section.new_child('p', data=True)
    section.new_child(data=0)
    return root


class TestAsDict:
    """Tests for as_dict."""

    def test_empty_node(self):
        """Test a bare node converts to an empty dict."""
        assert as_dict(Node()) == {}

    def test_root_node(self):
        """Test only non-empty keys are emitted."""
        assert as_dict(new_node()) == {'Tags': ['root']}

    def test_data_only(self):
        """Test a payload without tags or children."""
        assert Node(data=5).as_dict() == {'Data': 5}

    def test_none_payload_is_emitted(self):
        """Test a None payload is kept as Data."""
        assert as_dict(Node(data=None)) == {'Data': None}

    def test_nested(self):
        """Test children are converted in order."""
        root = new_node()
        a = root.new_child('a', data=1)
        a.new_child('a1')
        root.new_child('b')
        assert as_dict(root) == {
            'Tags': ['root'],
            'Children': [
                {'Data': 1, 'Tags': ['a'], 'Children': [{'Tags': ['a1']}]},
                {'Tags': ['b']},
            ],
        }

    def test_subtree_only(self, document_tree):
        """Test converting an inner node ignores its ancestors."""
        head = document_tree.child_by_tag('head')
        assert as_dict(head) == {
            'Tags': ['head'],
            'Children': [
                {'Data': 'Hello', 'Tags': ['title']},
                {'Data': None, 'Tags': ['meta']},
            ],
        }


class TestLoadDict:
    """Tests for load_dict."""

    def test_load_into_node(self):
        """Test the target represents the top-level mapping."""
        target = new_node()
        load_dict(target, {
            'Data': 'top',
            'Tags': ['root', 'x'],
            'Children': [{'Tags': ['c'], 'Data': 1}],
        })
        assert target.data == 'top'
        assert target.tags == ['root', 'x']
        assert len(target) == 1
        kid = target.child(0)
        assert kid.tags == ['c']
        assert kid.data == 1
        assert kid.parent is target

    def test_load_replaces_previous_state(self):
        """Test data, tags and children of the target are replaced."""
        target = new_node('old', data='old')
        old_kid = target.new_child('old-kid')
        target.load_dict({'Tags': ['new']})
        assert target.tags == ['new']
        assert target.has_data is False
        assert len(target) == 0
        assert old_kid.parent is None

    def test_load_keeps_parent_link(self):
        """Test loading into a child keeps it in place."""
        root = new_node()
        root.new_child('first')
        target = root.new_child('second')
        target.load_dict({'Tags': ['loaded'], 'Children': [{}]})
        assert root.child(1) is target
        assert target.parent is root
        assert target.tags == ['loaded']
        assert len(target) == 1
        assert len(root) == 2

    def test_missing_keys(self):
        """Test an empty mapping yields an empty node."""
        target = new_node(data=1)
        target.load_dict({})
        assert target.tags == []
        assert target.has_data is False

    def test_null_tags_and_children(self):
        """Test null Tags and Children are treated as absent."""
        target = Node()
        target.load_dict({'Tags': None, 'Children': None, 'Data': 0})
        assert target.data == 0
        assert target.tags == []

    def test_unknown_keys_ignored(self):
        """Test extra keys do not matter."""
        target = Node()
        target.load_dict({'Tags': ['a'], 'Extra': 1})
        assert target.tags == ['a']

    def test_duplicate_tags_collapsed(self):
        """Test tags keep the tag store rules."""
        target = Node()
        target.load_dict({'Tags': ['a', 'b', 'a']})
        assert target.tags == ['a', 'b']

    def test_nested_mapping_payload_stays_opaque(self):
        """Test a payload shaped like a node document is plain data."""
        payload = {'Tags': ['x'], 'Children': []}
        target = Node.from_dict({'Data': payload})
        assert target.data == payload
        assert len(target) == 0

    def test_node_payload_aborts(self):
        """Test a Node payload raises and leaves the target untouched."""
        target = new_node('keep')
        kid = target.new_child()
        with pytest.raises(DataTypeError):
            target.load_dict({
                'Tags': ['x'],
                'Children': [{'Data': 1}, {'Data': Node()}],
            })
        assert target.tags == ['root', 'keep']
        assert target.children == [kid]
        assert kid.parent is target

    @pytest.mark.parametrize('source', [
        [],
        'text',
        {'Tags': 'root'},
        {'Tags': ['ok', 3]},
        {'Children': {'Tags': ['a']}},
        {'Children': [{'Tags': ['a']}, 'bad']},
        {'Children': [{'Children': [{'Tags': [None]}]}]},
    ])
    def test_malformed(self, source):
        """Test malformed documents raise and leave the target untouched."""
        target = new_node()
        with pytest.raises(DeserializationError):
            target.load_dict(source)
        assert target.tags == ['root']
        assert len(target) == 0

    def test_error_hierarchy(self):
        """Test DeserializationError is a NodeTreeError and a ValueError."""
        assert issubclass(DeserializationError, NodeTreeError)
        assert issubclass(DeserializationError, ValueError)

    def test_error_message_has_path(self):
        """Test the failing position is reported."""
        with pytest.raises(DeserializationError, match=r"#0\.#1"):
            Node.from_dict({'Children': [{'Children': [{}, 'bad']}]})


class TestJson:
    """Tests for the JSON wire format."""

    def test_to_json(self):
        """Test JSON output matches as_dict."""
        root = new_node()
        root.new_child('a', data={'k': [1, 2]})
        assert json.loads(to_json(root)) == as_dict(root)

    def test_to_json_kwargs(self):
        """Test json.dumps options pass through."""
        text = new_node().to_json(indent=2)
        assert '\n' in text

    def test_load_json(self):
        """Test loading a JSON document."""
        target = new_node()
        load_json(target, '{"Tags": ["root"], "Children": '
                          '[{"Data": "x", "Tags": ["a"]}, {"Tags": ["b"]}]}')
        assert target.child_by_tag('a').data == 'x'
        assert target.child_index_by_tag('b') == 1

    def test_invalid_json(self):
        """Test invalid JSON raises DeserializationError."""
        target = new_node()
        with pytest.raises(DeserializationError, match="invalid JSON") as exc:
            target.load_json('{"Tags": [')
        assert isinstance(exc.value.__cause__, json.JSONDecodeError)
        assert target.tags == ['root']

    def test_from_json(self):
        """Test building a free-standing node from JSON."""
        node = Node.from_json(b'{"Data": 1, "Tags": ["t"]}')
        assert node.parent is None
        assert node.data == 1
        assert node.tags == ['t']


class TestRoundTrip:
    """Tests for serialize-then-load."""

    def test_dict_round_trip(self, document_tree):
        """Test tags, payloads and order survive as_dict/load_dict."""
        copy = new_node()
        copy.load_dict(document_tree.as_dict())
        assert _shape(copy) == _shape(document_tree)

    def test_json_round_trip(self, document_tree):
        """Test the same through JSON."""
        copy = Node.from_json(document_tree.to_json())
        assert _shape(copy) == _shape(document_tree)

    def test_round_trip_parents(self, document_tree):
        """Test every loaded node points at its parent."""
        copy = Node.from_dict(as_dict(document_tree))
        for node, _ in copy.walk():
            assert node in node.parent.children
        assert copy.child_by_tag_deep('section', 'main').depth == 1

    def test_deep_nesting(self):
        """Test a long chain keeps its depth."""
        root = new_node()
        node = root
        for i in range(50):
            node = node.new_child(f"level{i}", data=i)
        copy = Node.from_json(root.to_json())
        leaf = copy.child_by_tag_deep('level49')
        assert leaf.data == 49
        assert leaf.depth == 49

    def test_dict_round_trip_beyond_recursion_limit(self):
        """Test as_dict/load_dict handle chains deeper than the recursion limit."""
        depth = 3000
        root = new_node()
        node = root
        for i in range(depth):
            node = node.new_child(f"level{i}", data=i)
        document = root.as_dict()
        level = document
        for _ in range(depth):
            level = level['Children'][0]
        assert level == {'Data': depth - 1, 'Tags': [f"level{depth - 1}"]}

        copy = Node.from_dict(document)
        nodes = [node for node, _ in copy.walk()]
        assert len(nodes) == depth
        assert [n.data for n in nodes] == list(range(depth))
        assert nodes[-1].depth == depth - 1
        assert nodes[-1].parent is nodes[-2]
