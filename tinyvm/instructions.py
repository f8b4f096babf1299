""" Object representation of opcodes, and functions to handle the actual instructions

    Every instruction is a single opcode byte followed by zero, one or two operand bytes:

        01 reg imm   load
        02 dst src   add
        04 dst src   sub
        03 addr      jump
        ff           halt

    Any other opcode byte decodes to an unrecognized instruction.
"""
from enum import Enum
from tinyvm.memory import Memory, BYTE_MAX

### Constants and utilities
class InstructionException(Exception):
    pass

class InstructionType(Enum):
    load_immediate     = 'load'
    add_registers      = 'add'
    subtract_registers = 'sub'
    jump               = 'jump'
    halt               = 'halt'
    unrecognized       = 'unrecognized'

class OperandType(Enum):
    """ Declared with opcode handlers to give hints on how to display operands """
    register  = 1
    immediate = 2
    address   = 3

class Instruction(object):
    """ A decoded instruction. Only lives for a single decode/execute cycle. """
    def __init__(self, instruction_type, operands, address, length, opcode):
        self.instruction_type = instruction_type
        self.operands = tuple(operands)
        self.address = address
        self.length = length
        self.opcode = opcode

    @property
    def next_address(self):
        return self.address + self.length

    @property
    def handler(self):
        return handler_for(self.instruction_type)

    def __eq__(self,other):
        if not isinstance(other,Instruction):
            return NotImplemented
        return (self.instruction_type, self.operands, self.address, self.length, self.opcode) == \
               (other.instruction_type, other.operands, other.address, other.length, other.opcode)

    def __repr__(self):
        return 'Instruction(%s, %s, 0x%04x)' % (self.instruction_type.name, self.operands, self.address)

    def __str__(self):
        return format_description(self)

### Passed in memory and the address of the next instruction, return the decoded instruction
def read_instruction(memory,address):
    """ Read the instruction at the given address. Raises MemoryAccessException if the opcode
        or any of its operands fall outside of memory. """
    opcode = memory[address]
    handler = OPCODE_HANDLERS.get(opcode)
    if not handler:
        return Instruction(InstructionType.unrecognized, (), address, 1, opcode)

    operands = []
    for i in range(0,len(handler['types'])):
        operands.append(memory[address+1+i])

    return Instruction(handler['type'], operands, address, 1+len(operands), opcode)

def handler_for(instruction_type):
    if instruction_type == InstructionType.unrecognized:
        return UNRECOGNIZED_HANDLER
    for handler in OPCODE_HANDLERS.values():
        if handler['type'] == instruction_type:
            return handler
    raise InstructionException('No handler for %s' % instruction_type)

def opcode_for(instruction_type):
    for opcode, handler in OPCODE_HANDLERS.items():
        if handler['type'] == instruction_type:
            return opcode
    raise InstructionException('No opcode for %s' % instruction_type)

def format_description(instruction):
    """ Create a text description of this instruction """
    handler = instruction.handler
    if instruction.instruction_type == InstructionType.unrecognized:
        return '%s 0x%02x' % (handler['name'], instruction.opcode)

    description = handler['name']
    for operand,hint in zip(instruction.operands,handler['types']):
        if hint == OperandType.register:
            description += ' r%d' % operand
        elif hint == OperandType.address:
            description += ' 0x%04x' % operand
        else:
            description += ' %d' % operand
    return description

### For testing and loaders. Pass in a type and operands and make the memory that represents this instruction
def create_instruction(instruction_type, operands=()):
    if instruction_type == InstructionType.unrecognized:
        raise InstructionException('Cannot encode an unrecognized instruction')

    opcode = opcode_for(instruction_type)
    handler = OPCODE_HANDLERS[opcode]
    if len(operands) != len(handler['types']):
        raise InstructionException('%s takes %d operands, got %d' %
                                   (handler['name'], len(handler['types']), len(operands)))

    data = [opcode]
    for operand in operands:
        if operand < 0 or operand > BYTE_MAX:
            raise InstructionException('Operand %d does not fit in a byte' % operand)
        data.append(operand)
    return Memory(data)

def create_program(*instructions):
    """ Concatenate (instruction_type, operands) pairs into one image """
    data = bytearray()
    for instruction in instructions:
        data.extend(create_instruction(*instruction))
    return Memory(data)

### Interpreter actions, returned at end of each instruction to tell interpreter how to proceed
class NextInstructionAction(object):
    """ Interpreter should proceed to next instruction, address provided """
    def __init__(self, next_address):
        self.next_address = next_address

    def apply(self,interpreter):
        interpreter.pc = self.next_address
        return True

class JumpAction(object):
    """ Interpreter should continue at an absolute address. The address is not checked here. """
    def __init__(self, address):
        self.address = address

    def apply(self,interpreter):
        interpreter.pc = self.address
        return True

class HaltAction(object):
    def apply(self,interpreter):
        interpreter.halt()
        return False

class UnrecognizedAction(object):
    """ Decoding failed at address. Interpreter stops without touching registers """
    def __init__(self, address):
        self.address = address

    def apply(self,interpreter):
        interpreter.unrecognized(self.address)
        return False

###
### All handlers are passed in an interpreter and information about the given instruction
### and return an action object telling interpreter how to proceed.
### Register operands that are out of range turn the instruction into a no-op.
###

def op_load(interpreter,operands,next_address):
    reg, value = operands
    registers = interpreter.machine.registers
    if registers.is_valid_address(reg):
        registers[reg] = value
    return NextInstructionAction(next_address)

def op_add(interpreter,operands,next_address):
    dst, src = operands
    registers = interpreter.machine.registers
    if registers.is_valid_address(dst) and registers.is_valid_address(src):
        registers[dst] = (registers[dst] + registers[src]) & BYTE_MAX
    return NextInstructionAction(next_address)

def op_sub(interpreter,operands,next_address):
    dst, src = operands
    registers = interpreter.machine.registers
    if registers.is_valid_address(dst) and registers.is_valid_address(src):
        registers[dst] = (registers[dst] - registers[src]) & BYTE_MAX
    return NextInstructionAction(next_address)

def op_jump(interpreter,operands,next_address):
    return JumpAction(operands[0])

def op_halt(interpreter,operands,next_address):
    return HaltAction()

def op_unrecognized(interpreter,operands,next_address):
    return UnrecognizedAction(interpreter.pc)

OPCODE_HANDLERS = {
0x01: {'name': 'load', 'type': InstructionType.load_immediate,
       'types': (OperandType.register,OperandType.immediate), 'handler': op_load},
0x02: {'name': 'add', 'type': InstructionType.add_registers,
       'types': (OperandType.register,OperandType.register), 'handler': op_add},
0x03: {'name': 'jump', 'type': InstructionType.jump,
       'types': (OperandType.address,), 'handler': op_jump},
0x04: {'name': 'sub', 'type': InstructionType.subtract_registers,
       'types': (OperandType.register,OperandType.register), 'handler': op_sub},
0xFF: {'name': 'halt', 'type': InstructionType.halt,
       'types': (), 'handler': op_halt},
}

UNRECOGNIZED_HANDLER = {'name': 'unrecognized', 'type': InstructionType.unrecognized,
                        'types': (), 'handler': op_unrecognized}
