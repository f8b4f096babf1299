""" Frontend support shared by the runners: loading program images, reporting results and
    tracing executed instructions. None of this is part of the VM core. """
import os

from tinyvm.interpreter import Machine,Interpreter,InterpreterException,MEMORY_SIZE
from tinyvm.memory import MemoryException

# LOAD r0 10, LOAD r1 20, LOAD r2 30, ADD r0 r1, SUB r0 r2, HALT
SAMPLE_PROGRAM = bytes([
    0x01, 0x00, 10,
    0x01, 0x01, 20,
    0x01, 0x02, 30,
    0x02, 0x00, 0x01,
    0x04, 0x00, 0x02,
    0xFF,
])

HEX_EXTENSION = '.hex'

class ConfigException(Exception):
    pass

def parse_hex(text):
    """ Convert hex text into bytes. Bytes are separated by whitespace, may carry a 0x prefix,
        and anything after a # is a comment """
    data = bytearray()
    for line_number, line in enumerate(text.splitlines(),1):
        line = line.split('#',1)[0]
        for token in line.split():
            try:
                value = int(token,16)
            except ValueError:
                raise ConfigException('Invalid hex byte "%s" on line %d' % (token,line_number))
            if value < 0 or value > 0xFF:
                raise ConfigException('Value "%s" on line %d does not fit in a byte' % (token,line_number))
            data.append(value)
    return bytes(data)

def load_program(path,hex_format=None):
    """ Read a program image from path. Hex text is assumed for .hex files unless hex_format says otherwise """
    if hex_format is None:
        hex_format = os.path.splitext(path)[1].lower() == HEX_EXTENSION
    try:
        if hex_format:
            with open(path,'r',encoding='ascii') as f:
                return parse_hex(f.read())
        with open(path,'rb') as f:
            return f.read()
    except (OSError,UnicodeDecodeError) as e:
        raise ConfigException('Unable to read program %s. %s' % (path,e))

def load_interpreter(program,memory_size=MEMORY_SIZE,max_steps=None):
    try:
        machine = Machine(memory_size=memory_size)
        machine.load(program)
    except (MemoryException,InterpreterException) as e:
        raise ConfigException('Unable to load program. %s' % e)
    return Interpreter(machine,max_steps=max_steps)

def describe_state(interpreter):
    """ Return a list of lines summarizing the interpreter """
    registers = interpreter.registers
    lines = ['Result: %d' % registers[0],
             'Registers: %s' % ' '.join(['r%d=%d' % (i,v) for i,v in enumerate(registers)]),
             'PC: 0x%04x' % interpreter.pc,
             'Steps: %d' % interpreter.steps]
    if interpreter.running:
        lines.append('State: running')
    else:
        lines.append('State: stopped (%s at 0x%04x)' % (interpreter.stop_reason.value,interpreter.stop_address))
    return lines

class Tracer(object):
    """ Records each executed instruction. Written out to a file on exit """
    def __init__(self):
        self.instructions = []

    def log_instruction(self,address,description):
        self.instructions.append('0x%04x: %s' % (address,description))

    def write(self,path):
        with open(path,'w') as f:
            for line in self.instructions:
                f.write(line)
                f.write('\n')

class STDOUTOutputStream(object):
    def show(self,lines):
        for line in lines:
            print(line)
