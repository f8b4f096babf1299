""" Support classes around working with virtual "memory" and registers in the VM """

BYTE_MAX = 0xFF

class MemoryException(Exception):
    pass

class MemoryAccessException(MemoryException):
    """ Thrown when something reads outside the bounds of memory """
    def __init__(self, address, size):
        super(MemoryAccessException,self).__init__('Address 0x%04x out of range (size 0x%04x)' % (address,size))
        self.address = address
        self.size = size

class Memory(object):
    """ A fixed-size block of unsigned bytes. Every single-address access is bounds checked,
        and negative addresses never wrap around to the end. """
    def __init__(self, data):
        self._raw_data = bytearray(data)

    def is_valid_address(self,idx):
        return 0 <= idx < len(self._raw_data)

    def load(self,data,start_address=0):
        """ Copy data into memory starting at start_address """
        data = bytearray(data)
        if start_address < 0 or start_address + len(data) > len(self):
            raise MemoryException('Image of %d bytes does not fit at 0x%04x in %d bytes of memory' %
                                  (len(data), start_address, len(self)))
        self._raw_data[start_address:start_address+len(data)] = data

    def __len__(self):
        return len(self._raw_data)

    def __iter__(self):
        return iter(self._raw_data)

    def __eq__(self,other):
        if isinstance(other,Memory):
            return self._raw_data == other._raw_data
        return self._raw_data == other

    def __str__(self):
        return ''.join(['%.2x' % x for x in self._raw_data])

    def __getitem__(self,idx):
        """ Return byte at the provided address. Slices follow normal sequence rules. """
        if isinstance(idx,slice):
            return self._raw_data[idx]
        if not self.is_valid_address(idx):
            raise MemoryAccessException(idx,len(self))
        return self._raw_data[idx]

    def __setitem__(self,idx,val):
        """ Set byte at provided address """
        if not self.is_valid_address(idx):
            raise MemoryException('Write to 0x%04x out of range (size 0x%04x)' % (idx,len(self)))
        if val < 0 or val > BYTE_MAX:
            raise MemoryException('Storing %d to 0x%04x, which does not fit in a byte' % (val,idx))
        self._raw_data[idx] = val

    def lines(self, width=16, start_address=0, end_address=None):
        """ Return memory as a list of hex dump lines, width bytes per line """
        if end_address is None or end_address > len(self):
            end_address = len(self)
        result = []
        counter = max(start_address,0)
        while counter < end_address:
            row = ['%.2x' % x for x in self._raw_data[counter:min(counter+width,end_address)]]
            result.append('%s %s' % ('%.4x' % counter, ' '.join(row)))
            counter += width
        return result

    def dump(self, width=16,start_address=0,end_address=None):
        """ Dump memory in a convienient format """
        for line in self.lines(width,start_address,end_address):
            print(line)

class RegisterFile(Memory):
    """ The general purpose registers. Same byte semantics as memory, but callers are
        expected to check is_valid_address before touching a register. """
    def __init__(self,count):
        super(RegisterFile,self).__init__([0] * count)

    def values(self):
        return list(self._raw_data)
