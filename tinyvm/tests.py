""" Tests for tinyvm memory """

import unittest

from tinyvm.memory import Memory,RegisterFile,MemoryException,MemoryAccessException

class MemoryTests(unittest.TestCase):
    def test_from_integers(self):
        mem = Memory([1,2,3])
        self.assertEqual(3, len(mem))
        self.assertEqual(1,mem[0])
        self.assertEqual(2,mem[1])
        self.assertEqual(3,mem[2])
        self.assertEqual(bytearray([1,2]), mem[0:2])

    def test_from_chars(self):
        mem = Memory(b'\x01\x02\x03')
        self.assertEqual(3, len(mem))
        self.assertEqual(1,mem[0])
        self.assertEqual(3,mem[2])

    def test_read_past_end(self):
        mem = Memory([1,2,3])
        with self.assertRaises(MemoryAccessException) as cm:
            mem[3]
        self.assertEqual(3, cm.exception.address)
        self.assertEqual(3, cm.exception.size)

    def test_negative_address_does_not_wrap(self):
        mem = Memory([1,2,3])
        self.assertRaises(MemoryAccessException, lambda: mem[-1])

    def test_access_exception_is_memory_exception(self):
        self.assertTrue(issubclass(MemoryAccessException,MemoryException))

    def test_set(self):
        mem = Memory([0,0])
        mem[1] = 0xFF
        self.assertEqual(0xFF, mem[1])
        self.assertEqual(0, mem[0])

    def test_set_out_of_range(self):
        mem = Memory([0,0])
        self.assertRaises(MemoryException, mem.__setitem__, 2, 1)
        self.assertRaises(MemoryException, mem.__setitem__, -1, 1)

    def test_set_too_large(self):
        mem = Memory([0])
        self.assertRaises(MemoryException, mem.__setitem__, 0, 256)
        self.assertRaises(MemoryException, mem.__setitem__, 0, -1)
        self.assertEqual(0, mem[0])

    def test_load(self):
        mem = Memory([0] * 8)
        mem.load([1,2,3])
        self.assertEqual(bytearray([1,2,3,0,0,0,0,0]), mem[0:8])
        mem.load(b'\x09', start_address=7)
        self.assertEqual(9, mem[7])

    def test_load_exact_fit(self):
        mem = Memory([0] * 4)
        mem.load([4,3,2,1])
        self.assertEqual(1, mem[3])

    def test_load_too_large(self):
        mem = Memory([0] * 4)
        self.assertRaises(MemoryException, mem.load, [0] * 5)
        self.assertRaises(MemoryException, mem.load, [1,2], 3)
        self.assertEqual(bytearray(4), mem[0:4])

    def test_lines(self):
        mem = Memory(range(0,20))
        lines = mem.lines(width=16)
        self.assertEqual(2, len(lines))
        self.assertEqual('0000 00 01 02 03 04 05 06 07 08 09 0a 0b 0c 0d 0e 0f', lines[0])
        self.assertEqual('0010 10 11 12 13', lines[1])

    def test_lines_range(self):
        mem = Memory(range(0,32))
        self.assertEqual(['0004 04 05 06 07'], mem.lines(width=4,start_address=4,end_address=8))

    def test_str(self):
        self.assertEqual('01ff', str(Memory([1,0xff])))

class RegisterFileTests(unittest.TestCase):
    def test_zeroed(self):
        registers = RegisterFile(4)
        self.assertEqual([0,0,0,0], registers.values())

    def test_valid_address(self):
        registers = RegisterFile(4)
        self.assertTrue(registers.is_valid_address(0))
        self.assertTrue(registers.is_valid_address(3))
        self.assertFalse(registers.is_valid_address(4))
        self.assertFalse(registers.is_valid_address(-1))

    def test_values_is_a_copy(self):
        registers = RegisterFile(2)
        values = registers.values()
        values[0] = 5
        self.assertEqual(0, registers[0])

if __name__ == '__main__':
    unittest.main()
