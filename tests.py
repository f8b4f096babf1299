""" Tests for tinyvm """
import unittest
import os
import io
import tempfile
from contextlib import redirect_stdout,redirect_stderr

from tinyvm.interpreter import Machine,Interpreter,StopReason,InterpreterException,StepLimitException,\
                               MEMORY_SIZE,REGISTER_COUNT
from tinyvm.memory import Memory,MemoryException,MemoryAccessException
from tinyvm.instructions import InstructionType,Instruction,OPCODE_HANDLERS,InstructionException,\
                                read_instruction,format_description,create_instruction,create_program,\
                                NextInstructionAction,JumpAction,HaltAction,UnrecognizedAction

from generic_runner import SAMPLE_PROGRAM,ConfigException,Tracer,parse_hex,load_program,\
                           load_interpreter,describe_state
import run
import dump
import debug

PROGRAMS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)),'programs')

def make_interpreter(data,memory_size=MEMORY_SIZE,max_steps=None):
    machine = Machine(memory_size=memory_size)
    machine.load(data)
    return Interpreter(machine,max_steps=max_steps)

class InstructionTests(unittest.TestCase):
    def test_read_load(self):
        instruction = read_instruction(Memory([0x01,0x02,0x2a]),0)
        self.assertEqual(InstructionType.load_immediate,instruction.instruction_type)
        self.assertEqual((2,42),instruction.operands)
        self.assertEqual(3,instruction.length)
        self.assertEqual(3,instruction.next_address)

    def test_read_add(self):
        instruction = read_instruction(Memory([0xff,0x02,0x00,0x01]),1)
        self.assertEqual(InstructionType.add_registers,instruction.instruction_type)
        self.assertEqual((0,1),instruction.operands)
        self.assertEqual(1,instruction.address)
        self.assertEqual(4,instruction.next_address)

    def test_read_sub(self):
        instruction = read_instruction(Memory([0x04,0x03,0x02]),0)
        self.assertEqual(InstructionType.subtract_registers,instruction.instruction_type)
        self.assertEqual((3,2),instruction.operands)

    def test_read_jump(self):
        instruction = read_instruction(Memory([0x03,0x10]),0)
        self.assertEqual(InstructionType.jump,instruction.instruction_type)
        self.assertEqual((0x10,),instruction.operands)
        self.assertEqual(2,instruction.length)

    def test_read_halt(self):
        instruction = read_instruction(Memory([0xff]),0)
        self.assertEqual(InstructionType.halt,instruction.instruction_type)
        self.assertEqual((),instruction.operands)
        self.assertEqual(1,instruction.length)

    def test_read_unrecognized(self):
        for opcode in (0x00,0x05,0x10,0x80,0xfe):
            instruction = read_instruction(Memory([opcode,0x01,0x02]),0)
            self.assertEqual(InstructionType.unrecognized,instruction.instruction_type)
            self.assertEqual(opcode,instruction.opcode)
            self.assertEqual((),instruction.operands)

    def test_decoder_does_not_validate_registers(self):
        instruction = read_instruction(Memory([0x02,0xff,0x80]),0)
        self.assertEqual((0xff,0x80),instruction.operands)

    def test_read_operand_past_end(self):
        self.assertRaises(MemoryAccessException, read_instruction, Memory([0x01,0x00]), 0)
        self.assertRaises(MemoryAccessException, read_instruction, Memory([0x03]), 0)

    def test_read_opcode_past_end(self):
        with self.assertRaises(MemoryAccessException) as cm:
            read_instruction(Memory([0xff]),1)
        self.assertEqual(1,cm.exception.address)

    def test_read_is_idempotent(self):
        memory = Memory([0x01,0x00,0x0a,0xff])
        first = read_instruction(memory,0)
        second = read_instruction(memory,0)
        self.assertEqual(first,second)
        self.assertEqual(bytearray([0x01,0x00,0x0a,0xff]),memory[0:4])

    def test_format_description(self):
        memory = create_program((InstructionType.load_immediate,(0,10)),
                                (InstructionType.add_registers,(0,1)),
                                (InstructionType.subtract_registers,(2,3)),
                                (InstructionType.jump,(0x20,)),
                                (InstructionType.halt,()))
        descriptions = []
        address = 0
        while address < len(memory):
            instruction = read_instruction(memory,address)
            descriptions.append(format_description(instruction))
            address = instruction.next_address
        self.assertEqual(['load r0 10','add r0 r1','sub r2 r3','jump 0x0020','halt'],descriptions)

    def test_format_unrecognized(self):
        self.assertEqual('unrecognized 0xee',str(read_instruction(Memory([0xee]),0)))

    def test_create_instruction(self):
        self.assertEqual('01020a',str(create_instruction(InstructionType.load_immediate,(2,10))))
        self.assertEqual('020001',str(create_instruction(InstructionType.add_registers,(0,1))))
        self.assertEqual('040302',str(create_instruction(InstructionType.subtract_registers,(3,2))))
        self.assertEqual('03ff',str(create_instruction(InstructionType.jump,(0xff,))))
        self.assertEqual('ff',str(create_instruction(InstructionType.halt)))

    def test_create_instruction_errors(self):
        self.assertRaises(InstructionException, create_instruction, InstructionType.unrecognized)
        self.assertRaises(InstructionException, create_instruction, InstructionType.jump, (1,2))
        self.assertRaises(InstructionException, create_instruction, InstructionType.load_immediate, (0,256))
        self.assertRaises(InstructionException, create_instruction, InstructionType.load_immediate, (-1,0))

    def test_sample_program_encoding(self):
        program = create_program((InstructionType.load_immediate,(0,10)),
                                 (InstructionType.load_immediate,(1,20)),
                                 (InstructionType.load_immediate,(2,30)),
                                 (InstructionType.add_registers,(0,1)),
                                 (InstructionType.subtract_registers,(0,2)),
                                 (InstructionType.halt,()))
        self.assertEqual(Memory(SAMPLE_PROGRAM),program)

    def test_opcode_table(self):
        self.assertEqual(set([0x01,0x02,0x03,0x04,0xff]),set(OPCODE_HANDLERS.keys()))

class ExecuteTests(unittest.TestCase):
    def setUp(self):
        self.vm = make_interpreter([])

    def execute(self,instruction_type,operands,address=0):
        instruction = Instruction(instruction_type,operands,address,1+len(operands),0)
        return self.vm.execute(instruction)

    def test_load(self):
        for reg in range(0,REGISTER_COUNT):
            for value in (0,1,0x7f,0xff):
                vm = make_interpreter([])
                for i in range(0,REGISTER_COUNT):
                    vm.machine.registers[i] = 9 + i
                vm.pc = 6
                result = vm.execute(Instruction(InstructionType.load_immediate,(reg,value),6,3,0x01))
                self.assertTrue(result)
                expected = [9 + i for i in range(0,REGISTER_COUNT)]
                expected[reg] = value
                self.assertEqual(expected,vm.registers)
                self.assertEqual(9,vm.pc)

    def test_add(self):
        registers = self.vm.machine.registers
        registers[0] = 10
        registers[1] = 20
        self.assertTrue(self.execute(InstructionType.add_registers,(0,1)))
        self.assertEqual([30,20,0,0],self.vm.registers)
        self.assertEqual(3,self.vm.pc)

    def test_add_wraps(self):
        for a,b in ((200,100),(255,1),(255,255),(0,0)):
            vm = make_interpreter([])
            vm.machine.registers[2] = a
            vm.machine.registers[3] = b
            vm.execute(Instruction(InstructionType.add_registers,(2,3),0,3,0x02))
            self.assertEqual((a + b) % 256,vm.registers[2])
            self.assertEqual(b,vm.registers[3])

    def test_add_to_self(self):
        self.vm.machine.registers[1] = 0x90
        self.execute(InstructionType.add_registers,(1,1))
        self.assertEqual(0x20,self.vm.registers[1])

    def test_sub(self):
        registers = self.vm.machine.registers
        registers[0] = 30
        registers[2] = 30
        self.assertTrue(self.execute(InstructionType.subtract_registers,(0,2)))
        self.assertEqual(0,self.vm.registers[0])
        self.assertEqual(30,self.vm.registers[2])
        self.assertEqual(3,self.vm.pc)

    def test_sub_wraps(self):
        registers = self.vm.machine.registers
        registers[0] = 10
        registers[1] = 20
        self.execute(InstructionType.subtract_registers,(0,1))
        self.assertEqual(246,self.vm.registers[0])
        self.assertEqual(20,self.vm.registers[1])

    def test_invalid_registers_are_ignored(self):
        registers = self.vm.machine.registers
        for i in range(0,REGISTER_COUNT):
            registers[i] = i + 1
        cases = ((InstructionType.load_immediate,(4,99)),
                 (InstructionType.load_immediate,(0xff,99)),
                 (InstructionType.add_registers,(0,4)),
                 (InstructionType.add_registers,(4,0)),
                 (InstructionType.subtract_registers,(9,1)),
                 (InstructionType.subtract_registers,(1,0xff)))
        for i,(instruction_type,operands) in enumerate(cases):
            self.vm.pc = i * 3
            self.assertTrue(self.execute(instruction_type,operands,address=i * 3))
            self.assertEqual([1,2,3,4],self.vm.registers)
            self.assertEqual((i + 1) * 3,self.vm.pc)
        self.assertTrue(self.vm.running)

    def test_jump(self):
        self.vm.machine.registers[0] = 5
        self.assertTrue(self.execute(InstructionType.jump,(0x42,)))
        self.assertEqual(0x42,self.vm.pc)
        self.assertEqual([5,0,0,0],self.vm.registers)
        self.assertTrue(self.vm.running)

    def test_halt(self):
        self.vm.machine.registers[3] = 7
        self.vm.pc = 12
        self.assertFalse(self.execute(InstructionType.halt,(),address=12))
        self.assertEqual([0,0,0,7],self.vm.registers)
        self.assertEqual(12,self.vm.pc)
        self.assertEqual(StopReason.halted,self.vm.stop_reason)
        self.assertFalse(self.vm.running)

    def test_unrecognized(self):
        self.vm.pc = 5
        with self.assertLogs('tinyvm.interpreter',level='WARNING') as cm:
            self.assertFalse(self.execute(InstructionType.unrecognized,(),address=5))
        self.assertIn('Unknown instruction at PC=5',cm.output[0])
        self.assertEqual(StopReason.unrecognized,self.vm.stop_reason)
        self.assertEqual(5,self.vm.stop_address)
        self.assertEqual(5,self.vm.pc)
        self.assertEqual([0,0,0,0],self.vm.registers)

class ActionTests(unittest.TestCase):
    def test_actions(self):
        vm = make_interpreter([])
        self.assertTrue(NextInstructionAction(3).apply(vm))
        self.assertEqual(3,vm.pc)
        self.assertTrue(JumpAction(0x300).apply(vm))
        self.assertEqual(0x300,vm.pc)
        self.assertFalse(HaltAction().apply(vm))
        self.assertEqual(StopReason.halted,vm.stop_reason)

    def test_unrecognized_action(self):
        vm = make_interpreter([])
        self.assertFalse(UnrecognizedAction(7).apply(vm))
        self.assertEqual(7,vm.stop_address)

class MachineTests(unittest.TestCase):
    def test_defaults(self):
        machine = Machine()
        self.assertEqual(1024,len(machine.memory))
        self.assertEqual([0,0,0,0],machine.registers.values())
        self.assertEqual(0,machine.pc)
        self.assertEqual(bytearray(1024),machine.memory[0:1024])

    def test_configured_sizes(self):
        machine = Machine(memory_size=16,register_count=2)
        self.assertEqual(16,len(machine.memory))
        self.assertEqual([0,0],machine.registers.values())

    def test_invalid_sizes(self):
        self.assertRaises(InterpreterException, Machine, 0)
        self.assertRaises(InterpreterException, Machine, 16, 0)

    def test_load(self):
        machine = Machine(memory_size=4)
        machine.load([1,2,3,4])
        self.assertEqual(bytearray([1,2,3,4]),machine.memory[0:4])
        self.assertEqual(0,machine.pc)

    def test_load_too_large(self):
        machine = Machine(memory_size=4)
        self.assertRaises(MemoryException, machine.load, [0] * 5)

class InterpreterTests(unittest.TestCase):
    def test_sample_program(self):
        vm = make_interpreter(SAMPLE_PROGRAM)
        expected = [[10,0,0,0],[10,20,0,0],[10,20,30,0],[30,20,30,0],[0,20,30,0]]
        for registers in expected:
            self.assertEqual(Interpreter.RUNNING_STATE,vm.step())
            self.assertEqual(registers,vm.registers)
        self.assertEqual(15,vm.pc)
        self.assertEqual(Interpreter.STOPPED_STATE,vm.step())
        self.assertEqual(StopReason.halted,vm.stop_reason)
        self.assertEqual(15,vm.stop_address)
        self.assertEqual(0,vm.registers[0])
        self.assertEqual(6,vm.steps)

    def test_run(self):
        vm = make_interpreter(SAMPLE_PROGRAM)
        self.assertEqual(StopReason.halted,vm.run())
        self.assertEqual([0,20,30,0],vm.registers)

    def test_last_instruction(self):
        vm = make_interpreter(SAMPLE_PROGRAM)
        vm.step()
        self.assertEqual('load r0 10',vm.last_instruction)

    def test_decode_twice(self):
        vm = make_interpreter(SAMPLE_PROGRAM)
        self.assertEqual(vm.decode(),vm.decode())
        self.assertEqual(0,vm.pc)
        self.assertEqual([0,0,0,0],vm.registers)

    def test_step_after_stop_is_noop(self):
        vm = make_interpreter([0xff,0x01,0x00,0x05])
        vm.run()
        self.assertEqual(Interpreter.STOPPED_STATE,vm.step())
        self.assertEqual([0,0,0,0],vm.registers)
        self.assertEqual(0,vm.pc)
        self.assertEqual(1,vm.steps)

    def test_unrecognized_stops_run(self):
        vm = make_interpreter([0x01,0x00,0x07,0x42,0x01,0x00,0x09])
        with self.assertLogs('tinyvm.interpreter',level='WARNING'):
            self.assertEqual(StopReason.unrecognized,vm.run())
        self.assertEqual(3,vm.stop_address)
        self.assertEqual(3,vm.pc)
        self.assertEqual(7,vm.registers[0])

    def test_zeroed_memory_is_unrecognized(self):
        vm = make_interpreter([])
        with self.assertLogs('tinyvm.interpreter',level='WARNING'):
            self.assertEqual(StopReason.unrecognized,vm.run())
        self.assertEqual(0,vm.stop_address)

    def test_jump(self):
        vm = make_interpreter([0x03,0x05,0x01,0x00,0x63,0x01,0x01,0x07,0xff])
        vm.run()
        self.assertEqual([0,7,0,0],vm.registers)
        self.assertEqual(8,vm.pc)

    def test_jump_out_of_range(self):
        vm = make_interpreter([0x01,0x00,0x05,0x03,0x40],memory_size=16)
        vm.step()
        vm.step()
        self.assertEqual(0x40,vm.pc)
        self.assertTrue(vm.running)
        with self.assertLogs('tinyvm.interpreter',level='ERROR'):
            with self.assertRaises(MemoryAccessException) as cm:
                vm.step()
        self.assertEqual(0x40,cm.exception.address)
        self.assertFalse(vm.running)
        self.assertEqual(StopReason.memory_fault,vm.stop_reason)
        self.assertEqual(0x40,vm.stop_address)
        self.assertEqual([5,0,0,0],vm.registers)
        self.assertEqual(Interpreter.STOPPED_STATE,vm.step())

    def test_run_out_of_range(self):
        vm = make_interpreter([0x03,0x10],memory_size=16)
        with self.assertLogs('tinyvm.interpreter',level='ERROR'):
            self.assertRaises(MemoryAccessException, vm.run)
        self.assertEqual(StopReason.memory_fault,vm.stop_reason)

    def test_operands_past_end_of_memory(self):
        vm = make_interpreter([0xff,0xff,0xff,0x01,0x00],memory_size=5)
        vm.pc = 3
        with self.assertLogs('tinyvm.interpreter',level='ERROR'):
            self.assertRaises(MemoryAccessException, vm.step)
        self.assertEqual(3,vm.stop_address)
        self.assertEqual([0,0,0,0],vm.registers)

    def test_run_off_end_of_memory(self):
        vm = make_interpreter([0x01,0x00,0x01] * 3,memory_size=9)
        with self.assertLogs('tinyvm.interpreter',level='ERROR'):
            self.assertRaises(MemoryAccessException, vm.run)
        self.assertEqual(9,vm.stop_address)
        self.assertEqual(3,vm.steps)

    def test_step_limit(self):
        vm = make_interpreter([0x03,0x00],max_steps=50)
        with self.assertRaises(StepLimitException) as cm:
            vm.run()
        self.assertEqual(50,cm.exception.steps)
        self.assertEqual(0,cm.exception.pc)
        self.assertEqual(50,vm.steps)
        self.assertTrue(vm.running)

    def test_step_limit_can_resume(self):
        vm = make_interpreter(SAMPLE_PROGRAM,max_steps=2)
        self.assertRaises(StepLimitException, vm.run)
        self.assertEqual([10,20,0,0],vm.registers)
        vm.max_steps = None
        self.assertEqual(StopReason.halted,vm.run())
        self.assertEqual(0,vm.registers[0])

    def test_step_limit_not_hit(self):
        vm = make_interpreter(SAMPLE_PROGRAM,max_steps=6)
        self.assertEqual(StopReason.halted,vm.run())

    def test_debug_logging(self):
        vm = make_interpreter(SAMPLE_PROGRAM)
        with self.assertLogs('tinyvm.interpreter',level='DEBUG') as cm:
            vm.run()
        self.assertIn('DEBUG:tinyvm.interpreter:0x0000: load r0 10',cm.output)

    def test_instructions(self):
        vm = make_interpreter(SAMPLE_PROGRAM)
        descriptions = [str(i) for i in vm.instructions(3)]
        self.assertEqual(['load r0 10','load r1 20','load r2 30'],descriptions)

    def test_instructions_stop_at_end_of_memory(self):
        vm = make_interpreter([0x01,0x00,0x01,0xff,0x02],memory_size=5)
        instructions = vm.instructions(10)
        self.assertEqual(2,len(instructions))

class GenericRunnerTests(unittest.TestCase):
    def test_parse_hex(self):
        self.assertEqual(b'\x01\x00\x0a\xff',parse_hex('01 00 0a ff'))

    def test_parse_hex_comments(self):
        text = '# header\n01 00 0x0a  # load\n\nFF\n'
        self.assertEqual(b'\x01\x00\x0a\xff',parse_hex(text))

    def test_parse_hex_bad_token(self):
        with self.assertRaises(ConfigException) as cm:
            parse_hex('01\n0g')
        self.assertIn('line 2',str(cm.exception))

    def test_parse_hex_too_large(self):
        self.assertRaises(ConfigException, parse_hex, '100')

    def test_load_sample_hex(self):
        self.assertEqual(SAMPLE_PROGRAM,load_program(os.path.join(PROGRAMS_PATH,'sample.hex')))

    def test_load_binary(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp,'program.bin')
            with open(path,'wb') as f:
                f.write(SAMPLE_PROGRAM)
            self.assertEqual(SAMPLE_PROGRAM,load_program(path))

    def test_load_hex_without_extension(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp,'program.txt')
            with open(path,'w') as f:
                f.write('ff')
            self.assertEqual(b'ff',load_program(path))
            self.assertEqual(b'\xff',load_program(path,hex_format=True))

    def test_load_missing(self):
        self.assertRaises(ConfigException, load_program, '/nonexistent/program.bin')

    def test_load_interpreter_too_large(self):
        self.assertRaises(ConfigException, load_interpreter, b'\xff' * 17, memory_size=16)

    def test_load_interpreter_bad_memory_size(self):
        self.assertRaises(ConfigException, load_interpreter, SAMPLE_PROGRAM, memory_size=0)
        self.assertRaises(ConfigException, load_interpreter, SAMPLE_PROGRAM, memory_size=-1)

    def test_load_hex_not_text(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp,'program.hex')
            with open(path,'wb') as f:
                f.write(b'\xff\xfe01 00')
            self.assertRaises(ConfigException, load_program, path)

    def test_describe_state(self):
        vm = load_interpreter(SAMPLE_PROGRAM)
        self.assertEqual('State: running',describe_state(vm)[-1])
        vm.run()
        lines = describe_state(vm)
        self.assertEqual('Result: 0',lines[0])
        self.assertEqual('Registers: r0=0 r1=20 r2=30 r3=0',lines[1])
        self.assertEqual('PC: 0x000f',lines[2])
        self.assertEqual('Steps: 6',lines[3])
        self.assertEqual('State: stopped (halted at 0x000f)',lines[4])

    def test_tracer(self):
        tracer = Tracer()
        tracer.log_instruction(0,'load r0 10')
        tracer.log_instruction(3,'halt')
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp,'trace.txt')
            tracer.write(path)
            with open(path) as f:
                self.assertEqual('0x0000: load r0 10\n0x0003: halt\n',f.read())

class RunTests(unittest.TestCase):
    def run_main(self,args):
        out = io.StringIO()
        with redirect_stdout(out):
            code = run.main(args)
        return code, out.getvalue()

    def write_program(self,tmp,data):
        path = os.path.join(tmp,'program.bin')
        with open(path,'wb') as f:
            f.write(bytes(data))
        return path

    def test_sample(self):
        code, output = self.run_main(['--raw'])
        self.assertEqual(0,code)
        self.assertIn('Result: 0\n',output)

    def test_hex_file(self):
        code, output = self.run_main(['--raw',os.path.join(PROGRAMS_PATH,'wrap.hex')])
        self.assertEqual(0,code)
        self.assertIn('Registers: r0=44 r1=100 r2=246 r3=20',output)

    def test_unrecognized(self):
        with tempfile.TemporaryDirectory() as tmp:
            code, output = self.run_main(['--raw',self.write_program(tmp,[0x01,0x00,0x03,0x07])])
        self.assertEqual(1,code)
        self.assertIn('Result: 3',output)
        self.assertIn('unrecognized opcode at 0x0003',output)

    def test_memory_fault(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_program(tmp,[0x03,0x80])
            code, output = self.run_main(['--raw','--memory_size','64',path])
        self.assertEqual(2,code)
        self.assertIn('at PC 0x0080',output)

    def test_step_limit(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_program(tmp,[0x03,0x00])
            code, output = self.run_main(['--raw','--max_steps','10',path])
        self.assertEqual(2,code)
        self.assertIn('Step limit of 10 reached',output)

    def test_program_too_large(self):
        code, output = self.run_main(['--raw','--memory_size','8'])
        self.assertEqual(2,code)
        self.assertIn('Unable to load program',output)

    def test_bad_memory_size(self):
        code, output = self.run_main(['--raw','--memory_size','0'])
        self.assertEqual(2,code)
        self.assertIn('Memory size must be positive',output)

    def test_log_level(self):
        code, output = self.run_main(['--raw','--log_level','error'])
        self.assertEqual(0,code)

    def test_bad_log_level(self):
        with redirect_stderr(io.StringIO()):
            self.assertRaises(SystemExit, run.main, ['--raw','--log_level','LOUD'])

    def test_trace_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            trace_path = os.path.join(tmp,'trace.txt')
            code, output = self.run_main(['--raw','--trace_file',trace_path])
            with open(trace_path) as f:
                lines = f.read().splitlines()
        self.assertEqual(0,code)
        self.assertEqual(6,len(lines))
        self.assertEqual('0x0000: load r0 10',lines[0])
        self.assertEqual('0x000c: sub r0 r2',lines[4])
        self.assertEqual('0x000f: halt',lines[5])

    def test_start(self):
        out = io.StringIO()
        with redirect_stdout(out):
            vm = run.start(SAMPLE_PROGRAM,raw=True)
        self.assertEqual(StopReason.halted,vm.stop_reason)

    def test_window_lines(self):
        vm = load_interpreter(SAMPLE_PROGRAM)
        loop = run.MainLoop(vm,raw=False)
        loop.terp.idle()
        lines = loop.window_lines()
        self.assertIn('>>> 0003: load r1 20',lines)
        self.assertIn('    0006: load r2 30',lines)
        self.assertEqual('Running',loop.status_message())

class DumpTests(unittest.TestCase):
    def test_disassemble(self):
        vm = load_interpreter(SAMPLE_PROGRAM)
        listing = dump.disassemble(vm)
        self.assertEqual(6,len(listing))
        self.assertEqual((0,bytearray([0x01,0x00,0x0a]),'load r0 10'),listing[0])
        self.assertEqual((15,bytearray([0xff]),'halt'),listing[-1])

    def test_disassemble_from_address(self):
        vm = load_interpreter(SAMPLE_PROGRAM)
        listing = dump.disassemble(vm,start_address=9)
        self.assertEqual(['add r0 r1','sub r0 r2','halt'],[d for a,r,d in listing])

    def test_disassemble_end_of_memory(self):
        vm = load_interpreter([0x01,0x00,0x00,0x03,0x00,0x01,0x00],memory_size=7)
        listing = dump.disassemble(vm)
        self.assertEqual(['load r0 0','jump 0x0000'],[d for a,r,d in listing])

    def test_dump(self):
        out = io.StringIO()
        with redirect_stdout(out):
            dump.dump(SAMPLE_PROGRAM)
        output = out.getvalue()
        self.assertIn('Program length:           16 bytes',output)
        self.assertIn('0009: 02 00 01   add r0 r1',output)
        self.assertIn('0000 01 00 0a 01 00 14 01 02 1e 02 00 01 04 00 02 ff',output)

    def test_main_bad_address(self):
        out = io.StringIO()
        with redirect_stdout(out):
            code = dump.main(['--file',os.path.join(PROGRAMS_PATH,'sample.hex'),'--address','10'])
        self.assertEqual(1,code)
        self.assertIn('address must start with 0x',out.getvalue())

    def test_main_bad_memory_size(self):
        out = io.StringIO()
        with redirect_stdout(out):
            code = dump.main(['--file',os.path.join(PROGRAMS_PATH,'sample.hex'),'--memory_size','0'])
        self.assertEqual(1,code)
        self.assertIn('Unable to load program',out.getvalue())

    def test_main(self):
        out = io.StringIO()
        with redirect_stdout(out):
            code = dump.main(['--file',os.path.join(PROGRAMS_PATH,'sample.hex')])
        self.assertEqual(0,code)

class FakeWindow(object):
    def __init__(self):
        self.text = ''

    def addstr(self,*args):
        self.text += args[0] if len(args) == 1 else args[2]

class FakeDebugger(object):
    def __init__(self):
        self.active = False

    def activate(self):
        self.active = True

    def deactivate(self):
        self.active = False

class DebugTests(unittest.TestCase):
    def test_stepper(self):
        window = FakeWindow()
        vm = load_interpreter(SAMPLE_PROGRAM)
        debug.StepperWindow().redraw(window,vm,20)
        self.assertIn('0000: 01 00 0a\n >>> load r0 10\n',window.text)
        self.assertIn('000f: ff\n     halt\n',window.text)

    def test_stepper_end_of_memory(self):
        window = FakeWindow()
        vm = load_interpreter([0xff,0xff],memory_size=2)
        debug.StepperWindow().redraw(window,vm,20)
        self.assertIn('end of memory',window.text)

    def test_registers(self):
        window = FakeWindow()
        vm = load_interpreter(SAMPLE_PROGRAM)
        vm.run()
        debug.RegistersWindow().redraw(window,vm,20)
        self.assertIn('r1)  20  0x14\n',window.text)
        self.assertIn('pc) 0x000f\n',window.text)

    def test_memory_window(self):
        window = FakeWindow()
        vm = load_interpreter(SAMPLE_PROGRAM)
        memory_window = debug.MemoryWindow()
        self.assertTrue(memory_window.previous_line())
        self.assertEqual(0,memory_window.address)
        memory_window.redraw(window,vm,3)
        self.assertEqual('0000 01 00 0a 01 00 14 01 02 1e 02 00 01 04 00 02 ff\n0010 00 00 00 00 00 00 00 00 00 00 00 00 00 00 00 00\n',window.text)

    def test_breakpoint(self):
        vm = load_interpreter(SAMPLE_PROGRAM)
        terp = debug.Terp(vm,FakeDebugger())
        terp.run_until(breakpoint=9)
        for i in range(0,10):
            terp.idle()
        self.assertEqual(debug.RunState.PAUSED,terp.state)
        self.assertEqual(9,vm.pc)
        self.assertEqual([10,20,30,0],vm.registers)

    def test_parse_breakpoint(self):
        self.assertEqual(0x10,debug.parse_breakpoint('10'))
        self.assertEqual(0x1f,debug.parse_breakpoint('0x1f'))
        self.assertIsNone(debug.parse_breakpoint(None))
        self.assertRaises(ConfigException, debug.parse_breakpoint, 'zz')

    def test_start_bad_memory_size(self):
        self.assertRaises(ConfigException, debug.start, SAMPLE_PROGRAM, None, 0)

if __name__ == '__main__':
    unittest.main()
