import unittest
from nb8_tracer.common.errors import OutOfBoundsError
from nb8_tracer.transport.bus import Bus, RAM

class TestBusAbnormal(unittest.TestCase):
    def setUp(self):
        self.bus = Bus()
        self.bus.register_device(0x0000, 0x0FFF, RAM(0x1000)) # 4KB RAM

    def test_read_out_of_bounds(self):
        # Access unmapped memory (0x2000)
        with self.assertRaises(OutOfBoundsError):
            self.bus.read(0x2000)

    def test_write_out_of_bounds(self):
        with self.assertRaises(OutOfBoundsError):
            self.bus.write(0x2000, 0xFF)

    def test_out_of_bounds_is_index_error(self):
        with self.assertRaises(IndexError):
            self.bus.peek(0x1000)

    def test_write_invalid_data(self):
        with self.assertRaises(ValueError):
            self.bus.write(0x0000, 0x100)

    def test_register_device_invalid_range(self):
        # Start > End
        with self.assertRaises(ValueError):
            self.bus.register_device(0x2000, 0x1000, RAM(0x100))

        # Negative address
        with self.assertRaises(ValueError):
            self.bus.register_device(-1, 0x100, RAM(0x100))

    def test_register_device_size_mismatch(self):
        # Range size 0x100 (256), but RAM size 0x200 (512)
        with self.assertRaises(ValueError):
            self.bus.register_device(0x1000, 0x10FF, RAM(0x200))

    def test_register_non_device(self):
        with self.assertRaises(TypeError):
            self.bus.register_device(0x1000, 0x10FF, bytearray(0x100))

    def test_disk_without_storage(self):
        with self.assertRaises(RuntimeError):
            self.bus.read_disk(0)
        with self.assertRaises(RuntimeError):
            self.bus.write_disk(0, 1)

    def test_io_without_console(self):
        with self.assertRaises(RuntimeError):
            self.bus.read_io(0)
        with self.assertRaises(RuntimeError):
            self.bus.write_io(0, 1)

if __name__ == '__main__':
    unittest.main()
