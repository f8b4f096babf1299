import sys
from enum import Enum

import logging
import curses
import curses.ascii
from curses import wrapper

import argparse
import time

from tinyvm.interpreter import MEMORY_SIZE,InterpreterException
from tinyvm.memory import MemoryException

from generic_runner import ConfigException,SAMPLE_PROGRAM,load_program,load_interpreter,describe_state

# Window constants
STATUS_BAR_HEIGHT = 1
STATE_WINDOW_WIDTH = 40
STATE_RIGHT_MARGIN = 1

# How many instructions the stepper lists
STEPPER_LINES = 10

class DebugQuitException(Exception):
    pass

class ResetException(Exception):
    pass

class StepperWindow(object):
    def next_line(self):
        return False

    def previous_line(self):
        return False

    def redraw(self,window,vm,height):
        memory = vm.machine.memory
        instructions = vm.instructions(STEPPER_LINES)
        for i,instruction in enumerate(instructions):
            if i == 0:
                prefix = " >>> "
            else:
                prefix = "     "
            window.addstr('%04x: %s\n' %(instruction.address,' '.join(['%02x' % x for x in memory[instruction.address:instruction.next_address]])))
            window.addstr("%s%s\n\n" % (prefix,instruction))
        if len(instructions) < STEPPER_LINES:
            window.addstr('---- end of memory ----\n')

class MemoryWindow(object):
    def __init__(self):
        self.address = 0

    def next_line(self):
        self.address += 0x10
        return True

    def previous_line(self):
        self.address -= 0x10
        if self.address < 0:
            self.address = 0
        return True

    def redraw(self,window,vm,height):
        memory = vm.machine.memory
        for line in memory.lines(start_address=self.address,end_address=self.address+(0x10*(height-1))):
            window.addstr(line + '\n')

class RegistersWindow(object):
    def next_line(self):
        return False

    def previous_line(self):
        return False

    def redraw(self,window,vm,height):
        for i,value in enumerate(vm.registers):
            window.addstr('r%d) %3d  0x%02x\n' % (i,value,value))
        window.addstr('\n')
        window.addstr('pc) 0x%04x\n' % vm.pc)
        window.addstr('steps) %d\n' % vm.steps)

class DebuggerWindow(object):
    def __init__(self, vm,window):
        self.vm = vm
        self.is_active=False
        self.window = window
        self.window_handlers = {'i': StepperWindow(),
                                'm': MemoryWindow(),
                                'v': RegistersWindow()}
        self.current_handler = self.window_handlers['i']
        self.window_height,self.window_width = window.getmaxyx()

    def quit(self):
        raise DebugQuitException()

    def reset(self):
        raise ResetException()

    def key_pressed(self,key,terp):
        """ Key pressed while debugger active """
        ch = chr(key).lower()
        if ch == 'q':
            self.quit()
        elif ch == 'r':
            self.reset()
        elif ch == 's':
            terp.vm.step()
            self.current_handler = self.window_handlers['i']
            self.redraw()
        elif ch == 'g':
            self.current_handler = self.window_handlers['i']
            terp.run()
        elif ch == '.' or ch == '>':
            if self.current_handler.next_line():
                self.redraw()
        elif ch == ',' or ch == '<':
            if self.current_handler.previous_line():
                self.redraw()
        else:
            h = self.window_handlers.get(ch)
            if h:
                self.current_handler = h
                self.redraw()

    def activate(self):
        self.is_active=True
        self.redraw()

    def deactivate(self):
        self.is_active=False
        self.redraw()

    def redraw(self):
        curses.curs_set(0) # Hide cursor
        self.window.clear()
        if self.is_active:
            self.window.addstr(0,0,"PAUSED: (Q)uit (R)eset (M)em (V)regs (I)nstr (S)tep (G)o",curses.A_REVERSE)
        else:
            self.window.addstr(0,0,"Hit ESC for control",curses.A_REVERSE)

        self.window.move(2,0)
        if self.current_handler:
            self.current_handler.redraw(self.window, self.vm, self.window_height-3) # 3 is height of header + buffer
        self.window.refresh()

class StateWindow(object):
    """ Always visible summary of registers and stop state """
    def __init__(self,window):
        self.window = window

    def redraw(self,vm):
        self.window.clear()
        for line in describe_state(vm):
            self.window.addstr(line + '\n')
        self.window.refresh()

class ErrorWindow(object):
    def __init__(self,window):
        self.window = window

    def error(self,msg):
        self.window.addstr(0, 0, msg, curses.A_REVERSE)
        self.window.refresh()

class RunState(Enum):
    RUNNING                  = 0
    PAUSED                   = 1
    RUN_UNTIL_BREAKPOINT     = 2

class Terp(object):
    def __init__(self,vm,debugger):
        self.state = RunState.RUNNING
        self.vm = vm
        self.breakpoint = None
        self.debugger = debugger

    def run(self):
        if self.state != RunState.RUNNING:
            self.state = RunState.RUNNING
            self.debugger.deactivate()

    def pause(self):
        if self.state != RunState.PAUSED:
            self.state = RunState.PAUSED
            self.debugger.activate()

    def run_until(self,breakpoint=None):
        if self.state != RunState.RUN_UNTIL_BREAKPOINT:
            self.breakpoint=breakpoint
            self.state = RunState.RUN_UNTIL_BREAKPOINT
            self.debugger.deactivate()

    def idle(self):
        """ Called if no key is pressed """
        if not self.vm.running:
            self.pause()
        elif self.state == RunState.RUNNING:
            self.vm.step()
        elif self.state == RunState.RUN_UNTIL_BREAKPOINT:
            if self.breakpoint is not None and self.vm.pc == self.breakpoint:
                self.pause()
            else:
                self.vm.step()

    def key_pressed(self,ch):
        if self.state == RunState.RUNNING or self.state == RunState.RUN_UNTIL_BREAKPOINT:
            if ch == curses.ascii.ESC:
                self.pause()
        elif self.state == RunState.PAUSED:
            self.debugger.key_pressed(ch,self)

class MainLoop(object):
    def __init__(self,vm,breakpoint):
        self.vm = vm
        self.breakpoint = breakpoint

    def loop(self,screen):
        # Disable automatic echo
        curses.noecho()

        # Use unbufferd input
        curses.cbreak()

        screen_height,screen_width = screen.getmaxyx()
        if screen_width < 100:
            print('Terminal must be at least 100 characters wide')
            return
        if screen_height < 20:
            print('Terminal must be at least 20 characters in height')
            return

        state_window = StateWindow(curses.newwin(screen_height-STATUS_BAR_HEIGHT,STATE_WINDOW_WIDTH,STATUS_BAR_HEIGHT,0))

        # The debugger window
        debugger = DebuggerWindow(self.vm,
                                curses.newwin(screen_height-2,
                                 screen_width-STATE_WINDOW_WIDTH-STATE_RIGHT_MARGIN,
                                 0,
                                 STATE_WINDOW_WIDTH+STATE_RIGHT_MARGIN))
        debugger.redraw()
        debugger.window.timeout(1)

        # Start paused so the first instruction can be inspected
        terp = Terp(self.vm,debugger)
        if self.breakpoint is not None:
            terp.run_until(breakpoint=self.breakpoint)
        else:
            terp.pause()

        # Area for error messages
        error_window = ErrorWindow(curses.newwin(2,
                                screen_width-STATE_WINDOW_WIDTH-STATE_RIGHT_MARGIN,
                                screen_height-2,
                                STATE_WINDOW_WIDTH+STATE_RIGHT_MARGIN))

        while True:
            try:
                ch = debugger.window.getch()
                if ch == curses.ERR:
                    terp.idle()
                else:
                    terp.key_pressed(ch)
                state_window.redraw(self.vm)
            except MemoryException as e:
                error_window.error('%s at PC 0x%04x [%s]' % (e,self.vm.pc,self.vm.last_instruction))
                terp.pause()
            except InterpreterException as e:
                error_window.error('%s at PC 0x%04x [%s]' % (e,self.vm.pc,self.vm.last_instruction))
                terp.pause()

def parse_breakpoint(breakpoint):
    """ Breakpoints are hex addresses, with or without a 0x prefix """
    if breakpoint is None:
        return None
    if not breakpoint.startswith('0x'):
        breakpoint = '0x' + breakpoint
    try:
        return int(breakpoint,16)
    except ValueError:
        raise ConfigException('Breakpoint %s is not a valid hex address' % breakpoint)

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('--file')
    parser.add_argument('--hex',action='store_true')
    parser.add_argument('--breakpoint')
    parser.add_argument('--memory_size',type=int,default=MEMORY_SIZE)
    parser.add_argument('--log_file',help='Debug logging goes here, since the screen belongs to curses')
    data = parser.parse_args()

    if data.log_file:
        logging.basicConfig(filename=data.log_file,level=logging.DEBUG)

    try:
        breakpoint = parse_breakpoint(data.breakpoint)
        if data.file:
            program = load_program(data.file,hex_format=True if data.hex else None)
        else:
            program = SAMPLE_PROGRAM
        while True:
            try:
                start(program,breakpoint,data.memory_size)
            except ResetException:
                print("Resetting...")
                time.sleep(1)
    except DebugQuitException:
        print("Done.")
    except ConfigException as e:
        print(e)
        sys.exit(1)

def start(program,breakpoint,memory_size):
    vm = load_interpreter(program,memory_size=memory_size)
    loop = MainLoop(vm,breakpoint)
    wrapper(loop.loop)

if __name__ == "__main__":
    main()
