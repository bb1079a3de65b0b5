from django.test import TestCase
from tmsim.tm_model import (
    Configuration, Move, TapeWindow, Transition, hash_configuration, format_tape, describe_configuration
)


class TestTapeWindow(TestCase):
    """Test cases for the tape window"""

    def test_read_positions(self):
        """Test reading at positions on both sides"""
        # left holds positions -1, -2; right holds 0, 1
        tape = TapeWindow(['a', 'b'], ['c', 'd'])

        self.assertEqual(tape.read(0, '_'), 'c')
        self.assertEqual(tape.read(1, '_'), 'd')
        self.assertEqual(tape.read(-1, '_'), 'a')
        self.assertEqual(tape.read(-2, '_'), 'b')

        # Outside the window everything is blank
        self.assertEqual(tape.read(2, '_'), '_')
        self.assertEqual(tape.read(-3, '_'), '_')

    def test_contains_and_bounds(self):
        """Test window bounds"""
        tape = TapeWindow(['a', 'b'], ['c', 'd'])

        self.assertEqual(tape.bounds(), (-2, 1))
        self.assertTrue(tape.contains(-2))
        self.assertTrue(tape.contains(1))
        self.assertFalse(tape.contains(-3))
        self.assertFalse(tape.contains(2))
        self.assertEqual(len(tape), 4)

    def test_from_string(self):
        """Test building a window from a string"""
        tape = TapeWindow.from_string('101')
        self.assertEqual(tape.left, ())
        self.assertEqual(tape.right, ('1', '0', '1'))


class TestConfigurationHash(TestCase):
    """Test cases for configuration identity"""

    def test_equal_content_equal_hash(self):
        """Test that equal content gives equal hashes"""
        config1 = Configuration('s', [TapeWindow.from_string('10')], [0])
        config2 = Configuration('s', [TapeWindow((), ('1', '0'))], (0,))

        self.assertEqual(hash_configuration(config1), hash_configuration(config2))
        self.assertEqual(config1.key, config2.key)
        self.assertEqual(config1, config2)
        self.assertEqual(len({config1, config2}), 1)

    def test_different_content_different_hash(self):
        """Test that any content change changes the hash"""
        base = Configuration('s', [TapeWindow.from_string('10')], [0])

        variants = [
            Configuration('t', [TapeWindow.from_string('10')], [0]),  # state
            Configuration('s', [TapeWindow.from_string('10')], [1]),  # head
            Configuration('s', [TapeWindow.from_string('11')], [0]),  # symbol
            Configuration('s', [TapeWindow(['1'], ['0'])], [0]),  # same symbols, other side
            Configuration('s', [TapeWindow.from_string('10'), TapeWindow.from_string('')], [0, 0]),  # tapes
        ]

        keys = {variant.key for variant in variants}
        self.assertEqual(len(keys), len(variants))
        self.assertNotIn(base.key, keys)

    def test_to_dict(self):
        """Test the dictionary form"""
        config = Configuration('s', [TapeWindow(['x'], ['1', '0'])], [-1])
        self.assertEqual(config.to_dict(), {
            'state': 's',
            'tapes': [[['x'], ['1', '0']]],
            'heads': [-1]
        })


class TestTransition(TestCase):
    """Test cases for transitions and moves"""

    def test_move_offsets(self):
        """Test head offsets of moves"""
        self.assertEqual(Move.L.offset, -1)
        self.assertEqual(Move.R.offset, 1)
        self.assertEqual(Move.S.offset, 0)

    def test_to_dict_uses_keywords(self):
        """Test the dictionary form of a transition"""
        transition = Transition('a', 'b', (None, '1'), ('0', None), (Move.R, Move.S))
        self.assertEqual(transition.to_dict(), {
            'from': 'a',
            'to': 'b',
            'read': ['all', '1'],
            'write': ['0', 'same'],
            'move': ['R', 'S']
        })


class TestFormatting(TestCase):
    """Test cases for text output of configurations"""

    def test_format_tape_marks_head(self):
        """Test that the head cell is marked"""
        tape = TapeWindow([], ['1', '0', ' '])
        self.assertEqual(format_tape(tape, 1, ' '), '1 [0] □')

    def test_format_tape_head_outside_window(self):
        """Test formatting a head outside the window"""
        tape = TapeWindow([], ['1'])
        self.assertEqual(format_tape(tape, -1, ' '), '[□] 1')

    def test_describe_configuration(self):
        """Test the multi-line configuration description"""
        config = Configuration('q', [TapeWindow.from_string('ab'), TapeWindow.from_string('c')], [0, 0])
        description = describe_configuration(config, ' ')

        self.assertIn('State: q', description)
        self.assertIn('Tape 1: [a] b', description)
        self.assertIn('Tape 2: [c]', description)
