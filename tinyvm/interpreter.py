""" The machine state and the interpreter that drives it.

    An Interpreter owns exactly one Machine. Each step decodes the instruction at the program
    counter, runs its handler and applies the returned action. The interpreter starts in the
    running state and moves to the stopped state on halt, on an unrecognized opcode, or when
    decoding reads outside of memory. It never returns to running.
"""
import logging
from enum import Enum

from tinyvm.memory import Memory,RegisterFile,MemoryAccessException
from tinyvm.instructions import read_instruction,format_description

MEMORY_SIZE = 1024
REGISTER_COUNT = 4

logger = logging.getLogger(__name__)

class InterpreterException(Exception):
    """ General exception in handling by the interpreter """
    pass

class StepLimitException(InterpreterException):
    """ Thrown by run() when the optional step limit is reached """
    def __init__(self, steps, pc):
        super(StepLimitException,self).__init__('Step limit of %d reached at PC 0x%04x' % (steps,pc))
        self.steps = steps
        self.pc = pc

class StopReason(Enum):
    halted       = 'halted'
    unrecognized = 'unrecognized opcode'
    memory_fault = 'memory fault'

class Machine(object):
    """ Memory, registers and program counter. Created zeroed with pc at 0. """
    def __init__(self,memory_size=MEMORY_SIZE,register_count=REGISTER_COUNT):
        if memory_size <= 0:
            raise InterpreterException('Memory size must be positive, got %d' % memory_size)
        if register_count <= 0:
            raise InterpreterException('Register count must be positive, got %d' % register_count)
        self.memory = Memory([0] * memory_size)
        self.registers = RegisterFile(register_count)
        self.pc = 0

    def load(self,data):
        """ Write the initial program image to memory, starting at address 0 """
        self.memory.load(data,0)

class Interpreter(object):
    """ Runs the program held in a Machine. Set max_steps to make run() give up
        (with StepLimitException) after that many instructions. """
    RUNNING_STATE = 0
    STOPPED_STATE = 1

    def __init__(self,machine,max_steps=None):
        self.machine = machine
        self.max_steps = max_steps
        self.state = Interpreter.RUNNING_STATE
        self.stop_reason = None
        self.stop_address = None
        self.last_instruction = None
        self.steps = 0

    @property
    def pc(self):
        return self.machine.pc

    @pc.setter
    def pc(self,value):
        self.machine.pc = value

    @property
    def registers(self):
        return self.machine.registers.values()

    @property
    def running(self):
        return self.state == Interpreter.RUNNING_STATE

    def instruction_at(self,address):
        """ Return the instruction at the given address """
        return read_instruction(self.machine.memory,address)

    def current_instruction(self):
        """ Return the instruction pointed to by the program counter """
        return self.instruction_at(self.pc)

    def decode(self):
        return self.current_instruction()

    def execute(self,instruction):
        """ Apply the instruction to the machine. Return True if execution should continue """
        handler = instruction.handler['handler']
        action = handler(self,instruction.operands,instruction.next_address)
        return action.apply(self)

    def step(self):
        """ If in running state, decode and execute the current instruction. Returns the state. """
        if self.state != Interpreter.RUNNING_STATE:
            return self.state

        try:
            instruction = self.current_instruction()
        except MemoryAccessException as e:
            self._stop(StopReason.memory_fault,self.pc)
            logger.error('Memory fault decoding at PC 0x%04x: %s', self.pc, e)
            raise

        self.last_instruction = format_description(instruction)
        logger.debug('0x%04x: %s', instruction.address, self.last_instruction)
        self.execute(instruction)
        self.steps += 1
        return self.state

    def check_step_limit(self):
        """ Raise StepLimitException if max_steps is set and has been reached while running """
        if self.state == Interpreter.RUNNING_STATE and self.max_steps is not None and self.steps >= self.max_steps:
            raise StepLimitException(self.steps,self.pc)

    def run(self):
        """ Step until stopped and return the reason """
        while self.state == Interpreter.RUNNING_STATE:
            self.check_step_limit()
            self.step()
        return self.stop_reason

    def instructions(self,how_many,address=None):
        """ Return up to how_many instructions starting at address (default: the current
            instruction). Stops early at the end of memory. """
        instructions = []
        if address is None:
            address = self.pc

        for i in range(0,how_many):
            try:
                instruction = self.instruction_at(address)
            except MemoryAccessException:
                break
            instructions.append(instruction)
            address = instruction.next_address

        return instructions

    def halt(self):
        self._stop(StopReason.halted,self.pc)

    def unrecognized(self,address):
        logger.warning('Unknown instruction at PC=%d', address)
        self._stop(StopReason.unrecognized,address)

    def _stop(self,reason,address):
        self.state = Interpreter.STOPPED_STATE
        self.stop_reason = reason
        self.stop_address = address
        logger.info('Stopped (%s) at PC 0x%04x after %d steps', reason.value, address, self.steps)
