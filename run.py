import sys
import logging
import argparse

from enum import Enum

from tinyvm.interpreter import StopReason,StepLimitException,InterpreterException,MEMORY_SIZE
from tinyvm.memory import MemoryException,MemoryAccessException

from pygame_runner import PygameWrapper
from generic_runner import STDOUTOutputStream,ConfigException,Tracer,SAMPLE_PROGRAM,\
                           load_program,load_interpreter,describe_state

SETTINGS = {'dimensions': (640,480),
            'char_dimensions': (60,30),
            'font_name': 'courier',
            'font_size': 14,
            'caption': 'tinyvm'}

# How many instructions we execute per UI tick
STEPS_PER_TICK = 1

LOG_LEVELS = ['DEBUG','INFO','WARNING','ERROR']

# How many upcoming instructions the window lists
UPCOMING_INSTRUCTIONS = 10

EXIT_CODES = {StopReason.halted: 0,
              StopReason.unrecognized: 1,
              StopReason.memory_fault: 2}
STEP_LIMIT_EXIT_CODE = 2

class RunState(Enum):
    RUNNING  = 0
    FINISHED = 1
    FAILED   = 2

class Terp(object):
    """ Steps the interpreter on behalf of a frontend, feeding the tracer as it goes """
    def __init__(self,vm,tracer=None):
        self.state = RunState.RUNNING
        self.vm = vm
        self.tracer = tracer
        self.error = None

    def idle(self):
        """ Execute one instruction if still running """
        if self.state != RunState.RUNNING:
            return self.state

        try:
            self.vm.check_step_limit()
            address = self.vm.pc
            self.vm.step()
        except (MemoryException,InterpreterException) as e:
            self.error = e
            self.state = RunState.FAILED
            raise

        if self.tracer:
            self.tracer.log_instruction(address,self.vm.last_instruction)

        if not self.vm.running:
            self.state = RunState.FINISHED
        return self.state

class MainLoop(object):
    def __init__(self,vm,raw=False,tracer=None,steps_per_tick=STEPS_PER_TICK):
        self.vm = vm
        self.raw = raw
        self.tracer = tracer
        self.steps_per_tick = steps_per_tick
        self.terp = Terp(vm,tracer=tracer)

    def loop(self):
        if self.raw:
            self.raw_loop()
        else:
            self.window_loop()

    def raw_loop(self):
        while self.terp.idle() == RunState.RUNNING:
            pass
        STDOUTOutputStream().show(describe_state(self.vm))

    def window_loop(self):
        pygame_wrapper = PygameWrapper(SETTINGS)
        try:
            while pygame_wrapper.tick():
                for i in range(0,self.steps_per_tick):
                    try:
                        if self.terp.idle() != RunState.RUNNING:
                            break
                    except (MemoryException,InterpreterException):
                        break
                pygame_wrapper.show_status(self.status_message())
                pygame_wrapper.show(self.window_lines())
        finally:
            pygame_wrapper.close()

        if self.terp.error:
            raise self.terp.error

    def status_message(self):
        if self.terp.error:
            return 'ERROR: %s' % self.terp.error
        if self.terp.state == RunState.FINISHED:
            return 'Stopped. Close the window to exit'
        return 'Running'

    def window_lines(self):
        lines = describe_state(self.vm)
        lines.append('')
        for instruction in self.vm.instructions(UPCOMING_INSTRUCTIONS):
            if instruction.address == self.vm.pc:
                prefix = '>>> '
            else:
                prefix = '    '
            lines.append('%s%04x: %s' % (prefix,instruction.address,instruction))
        return lines

def start(program,raw=False,memory_size=MEMORY_SIZE,max_steps=None,trace_file_path=None):
    """ Run program and return its interpreter """
    tracer = None
    if trace_file_path:
        tracer = Tracer()

    vm = load_interpreter(program,memory_size=memory_size,max_steps=max_steps)
    loop = MainLoop(vm,raw=raw,tracer=tracer)
    try:
        loop.loop()
    finally:
        if tracer:
            tracer.write(trace_file_path)
    return vm

def main(args=None):
    parser = argparse.ArgumentParser(description='Run a tinyvm program')
    parser.add_argument('program',help='Program image to run. Runs the built in sample if omitted',nargs='?')
    parser.add_argument('--hex',help='Treat the program file as hex text',required=False,action='store_true')
    parser.add_argument('--raw',help='Output to stdout with no window',required=False,action='store_true')
    parser.add_argument('--memory_size',help='Size of memory in bytes',required=False,type=int,default=MEMORY_SIZE)
    parser.add_argument('--max_steps',help='Give up after this many instructions',required=False,type=int)
    parser.add_argument('--trace_file',help='Path to file to which all executed instructions are written on exit',required=False)
    parser.add_argument('--log_level',help='Logging level',required=False,default='WARNING',type=str.upper,choices=LOG_LEVELS)
    data = parser.parse_args(args)

    logging.basicConfig(level=data.log_level,format='%(levelname)s %(name)s: %(message)s')

    try:
        if data.program:
            program = load_program(data.program,hex_format=True if data.hex else None)
        else:
            program = SAMPLE_PROGRAM
        vm = start(program,
                   raw=data.raw,
                   memory_size=data.memory_size,
                   max_steps=data.max_steps,
                   trace_file_path=data.trace_file)
    except ConfigException as e:
        print(e)
        return 2
    except StepLimitException as e:
        print(e)
        return STEP_LIMIT_EXIT_CODE
    except MemoryAccessException as e:
        print('%s at PC 0x%04x' % (e,e.address))
        return EXIT_CODES[StopReason.memory_fault]

    if vm.stop_reason is None:
        # Window closed before the program stopped
        return 0
    return EXIT_CODES[vm.stop_reason]

if __name__ == "__main__":
    sys.exit(main())
