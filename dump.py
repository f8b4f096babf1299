#
# Disassemble and dump a tinyvm program image
#

import sys
import argparse

from tinyvm.interpreter import MEMORY_SIZE
from tinyvm.instructions import InstructionType
from generic_runner import ConfigException,load_program,load_interpreter

# Disassembly lines are capped so a program that fills memory still dumps quickly
MAX_INSTRUCTIONS = 256

def disassemble(vm,start_address=0,end_address=None,max_instructions=MAX_INSTRUCTIONS):
    """ Return a list of (address, raw bytes, description) for the instructions between
        start and end address. Stops at the end of memory or after the first halt """
    memory = vm.machine.memory
    if end_address is None:
        end_address = len(memory)

    listing = []
    for instruction in vm.instructions(max_instructions,address=start_address):
        if instruction.address >= end_address:
            break
        raw = memory[instruction.address:instruction.next_address]
        listing.append((instruction.address,raw,str(instruction)))
        if instruction.instruction_type in (InstructionType.halt,InstructionType.unrecognized):
            break
    return listing

def dump(program,start_address=0,memory_size=MEMORY_SIZE):
    vm = load_interpreter(program,memory_size=memory_size)
    memory = vm.machine.memory

    print('Program length:           %d bytes' % len(program))
    print('Memory size:              %d bytes' % len(memory))
    print('')
    print('Instructions\n------------\n')
    for address,raw,description in disassemble(vm,start_address=start_address):
        print('%04x: %-10s %s' % (address,' '.join(['%02x' % x for x in raw]),description))
    print('')

    print('Raw memory\n----------\n')
    end_address = max(start_address + 16,len(program))
    memory.dump(start_address=start_address,end_address=end_address)
    print('')

def main(args=None):
    parser = argparse.ArgumentParser(description='Disassemble a tinyvm program')
    parser.add_argument('--file',required=True)
    parser.add_argument('--hex',action='store_true')
    parser.add_argument('--address')
    parser.add_argument('--memory_size',type=int,default=MEMORY_SIZE)
    data = parser.parse_args(args)

    addr_tmp = data.address or '0x00'
    if not addr_tmp.startswith('0x'):
        print('address must start with 0x')
        return 1
    try:
        start_address = int(addr_tmp,0)
    except ValueError:
        print('address must start with 0x and be a valid hex address')
        return 1

    try:
        program = load_program(data.file,hex_format=True if data.hex else None)
        dump(program,start_address=start_address,memory_size=data.memory_size)
    except ConfigException as e:
        print(e)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
