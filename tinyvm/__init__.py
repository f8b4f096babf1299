#
# A tiny fetch-decode-execute virtual machine: four 8-bit registers, a fixed-size
# byte addressable memory and five instructions.
#
# memory.py       - bounds checked memory and register file
# instructions.py - decoding, descriptions and opcode handlers
# interpreter.py  - machine state and the run loop
#
