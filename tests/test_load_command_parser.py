import struct
import unittest

from machodump.core.constants import (
    LC_SEGMENT, LC_SEGMENT_64, LC_UUID, LC_LOAD_DYLIB, LC_LOAD_WEAK_DYLIB,
    LC_FUNCTION_STARTS, LC_DATA_IN_CODE, LC_CODE_SIGNATURE, LC_BUILD_VERSION,
    LC_UNIXTHREAD, CPU_TYPE_X86, S_CSTRING_LITERALS, S_ATTR_PURE_INSTRUCTIONS,
    S_ATTR_SOME_INSTRUCTIONS,
)
from machodump.core.errors import ShortRead
from machodump.core.formatting import format_source_version, format_version
from machodump.core.model import (
    BuildVersionCommand, DyldInfoCommand, DylibCommand, DylinkerCommand,
    DysymtabCommand, EntryPointCommand, LinkeditDataCommand, LoadCommandKind,
    Section64, SegmentCommand, SegmentCommand64, SourceVersionCommand,
    SymtabCommand, ThreadCommand, UnknownCommand, UuidCommand, VersionMinCommand,
)
from machodump.core.parser import parse
from machodump.plugins.load_commands_plugin import LoadCommandsPlugin
from machodump.plugins.shared_libs_plugin import shared_libraries

import macho_builder as mb
from macho_builder import HOST, OPPOSITE

UUID_BYTES = bytes.fromhex('3f2c1a7b9e4d4c5aa1b2c3d4e5f60718')
TEXT_VMADDR = 0x100000000
SOURCE_VERSION = (1100 << 40) | (2 << 30) | (3 << 20) | (4 << 10) | 5


def executable_commands(order=HOST):
    """Набор команд типичного 64-битного исполняемого файла"""
    text_sections = [
        mb.section('__text', '__TEXT', addr=TEXT_VMADDR + 0xf50, size=0x2a, offset=0xf50, align=4,
                   flags=S_ATTR_PURE_INSTRUCTIONS | S_ATTR_SOME_INSTRUCTIONS, order=order),
        mb.section('__cstring', '__TEXT', addr=TEXT_VMADDR + 0xf7a, size=0xd, offset=0xf7a,
                   flags=S_CSTRING_LITERALS, order=order),
    ]
    return [
        mb.segment('__PAGEZERO', vmsize=TEXT_VMADDR, maxprot=0, initprot=0, order=order),
        mb.segment('__TEXT', text_sections, vmaddr=TEXT_VMADDR, vmsize=0x1000, filesize=0x1000,
                   maxprot=5, initprot=5, order=order),
        mb.segment('__LINKEDIT', vmaddr=TEXT_VMADDR + 0x1000, vmsize=0x1000, fileoff=0x1000,
                   filesize=0x120, maxprot=1, initprot=1, order=order),
        mb.dyld_info([0, 0, 0, 0, 0, 0, 0, 0, 0x1000, 0x30], order=order),
        mb.symtab(0x1038, 3, 0x1068, 0x30, order=order),
        mb.dysymtab(list(range(18)), order=order),
        mb.dylinker('/usr/lib/dyld', order=order),
        mb.uuid_command(UUID_BYTES, order=order),
        mb.version_min(0x000a0e00, 0x000a0f00, order=order),
        mb.source_version(SOURCE_VERSION, order=order),
        mb.entry_point(0xf50, order=order),
        mb.dylib('/usr/lib/libSystem.B.dylib', current=0x050c3c01, order=order),
        mb.dylib('/usr/lib/libobjc.A.dylib', cmd=LC_LOAD_WEAK_DYLIB, order=order),
        mb.linkedit_data(LC_FUNCTION_STARTS, 0x1030, 8, order=order),
        mb.linkedit_data(LC_DATA_IN_CODE, 0x1038, 0, order=order),
        mb.build_version(1, 0x000b0000, 0x000c0300, [(3, 0x02610000), (1, 0x0c000300)], order=order),
        mb.linkedit_data(LC_CODE_SIGNATURE, 0x10a0, 0x80, order=order),
    ]


class TestLoadCommandParser(unittest.TestCase):
    def _parse_single(self, data):
        image = parse(mb.write_temp(self, data))
        self.assertFalse(image.is_fat)
        self.assertEqual(len(image.archs), 1)
        return image.archs[0]

    def test_command_table_invariants(self):
        """Число команд равно ncmds, сумма cmdsize равна sizeofcmds"""
        arch = self._parse_single(mb.mach_image(executable_commands()))
        header = arch.header
        self.assertEqual(len(arch.load_commands), header.ncmds)
        self.assertEqual(sum(command.cmdsize for command in arch.load_commands), header.sizeofcmds)
        for command in arch.load_commands:
            self.assertEqual(command.cmdsize % 8, 0)

    def test_decoded_variants(self):
        arch = self._parse_single(mb.mach_image(executable_commands()))
        expected = [
            SegmentCommand64, SegmentCommand64, SegmentCommand64, DyldInfoCommand,
            SymtabCommand, DysymtabCommand, DylinkerCommand, UuidCommand,
            VersionMinCommand, SourceVersionCommand, EntryPointCommand, DylibCommand,
            DylibCommand, LinkeditDataCommand, LinkeditDataCommand, BuildVersionCommand,
            LinkeditDataCommand,
        ]
        self.assertEqual([type(command) for command in arch.load_commands], expected)
        self.assertEqual(arch.load_commands[0].command_name, 'LC_SEGMENT_64')
        self.assertEqual(arch.load_commands[0].kind, LoadCommandKind.SEGMENT_64)
        self.assertEqual(arch.load_commands[16].command_name, 'LC_CODE_SIGNATURE')

    def test_segments_and_sections(self):
        arch = self._parse_single(mb.mach_image(executable_commands()))
        pagezero, text, linkedit = arch.load_commands[:3]

        self.assertEqual(pagezero.segment_name, '__PAGEZERO')
        self.assertEqual(pagezero.vmsize, TEXT_VMADDR)
        self.assertEqual(pagezero.sections, ())

        self.assertEqual(text.segment_name, '__TEXT')
        self.assertEqual(text.vmaddr, TEXT_VMADDR)
        self.assertEqual(text.nsects, 2)
        self.assertEqual(len(text.sections), text.nsects)
        self.assertEqual(text.cmdsize, 72 + 2 * 80)

        code, strings = text.sections
        self.assertIsInstance(code, Section64)
        self.assertEqual(code.name, '__text')
        self.assertEqual(code.segment_name, '__TEXT')
        self.assertEqual(code.addr, TEXT_VMADDR + 0xf50)
        self.assertEqual(code.align, 4)
        self.assertEqual(code.attributes, S_ATTR_PURE_INSTRUCTIONS | S_ATTR_SOME_INSTRUCTIONS)
        self.assertEqual(strings.name, '__cstring')
        self.assertEqual(strings.type, S_CSTRING_LITERALS)

        self.assertEqual(linkedit.fileoff, 0x1000)
        self.assertEqual(linkedit.maxprot, 1)

    def test_dylib_and_dylinker_strings(self):
        arch = self._parse_single(mb.mach_image(executable_commands()))
        dylinker = arch.load_commands[6]
        self.assertEqual(dylinker.name, '/usr/lib/dyld')
        self.assertEqual(dylinker.name_offset, 12)

        libsystem = arch.load_commands[11]
        self.assertEqual(libsystem.name, '/usr/lib/libSystem.B.dylib')
        self.assertEqual(libsystem.name_offset, 24)
        self.assertEqual(libsystem.timestamp, 2)
        self.assertEqual(format_version(libsystem.current_version), '1292.60.1')
        self.assertEqual(format_version(libsystem.compatibility_version), '1.0.0')

        self.assertEqual(arch.load_commands[12].cmd, LC_LOAD_WEAK_DYLIB)
        self.assertEqual(shared_libraries(arch),
                         ['/usr/lib/libSystem.B.dylib', '/usr/lib/libobjc.A.dylib'])

    def test_fixed_commands(self):
        arch = self._parse_single(mb.mach_image(executable_commands()))
        commands = arch.load_commands

        self.assertEqual(commands[3].export_off, 0x1000)
        self.assertEqual(commands[3].export_size, 0x30)
        self.assertEqual((commands[4].symoff, commands[4].nsyms), (0x1038, 3))
        self.assertEqual(commands[5].nlocrel, 17)
        self.assertEqual(commands[7].uuid_string, '3F2C1A7B-9E4D-4C5A-A1B2-C3D4E5F60718')
        self.assertEqual(format_version(commands[8].version), '10.14.0')
        self.assertEqual(format_source_version(commands[9].version), '1100.2.3.4.5')
        self.assertEqual(commands[10].entryoff, 0xf50)
        self.assertEqual((commands[13].dataoff, commands[13].datasize), (0x1030, 8))

        build = commands[15]
        self.assertEqual(build.platform, 1)
        self.assertEqual(format_version(build.minos), '11.0.0')
        self.assertEqual(build.ntools, 2)
        self.assertEqual([(tool.tool, tool.version) for tool in build.tools],
                         [(3, 0x02610000), (1, 0x0c000300)])

    def test_opposite_order_matches_native(self):
        """Образ в обратном порядке байт декодируется в те же значения"""
        native = self._parse_single(mb.mach_image(executable_commands(HOST)))
        swapped = self._parse_single(mb.mach_image(executable_commands(OPPOSITE), order=OPPOSITE))

        self.assertEqual(len(native.load_commands), len(swapped.load_commands))
        for left, right in zip(native.load_commands, swapped.load_commands):
            self.assertFalse(left.swap)
            self.assertTrue(right.swap)
            self.assertEqual(LoadCommandsPlugin.command_rows(left), LoadCommandsPlugin.command_rows(right))
            if isinstance(left, SegmentCommand):
                for a, b in zip(left.sections, right.sections):
                    self.assertEqual(LoadCommandsPlugin.section_rows(a), LoadCommandsPlugin.section_rows(b))

        text = swapped.load_commands[1]
        self.assertEqual(text.vmaddr, TEXT_VMADDR)
        self.assertEqual(text.sections[0].name, '__text')
        self.assertEqual(text.sections[0].addr, TEXT_VMADDR + 0xf50)
        self.assertEqual(swapped.load_commands[9].version, SOURCE_VERSION)
        self.assertEqual(shared_libraries(swapped), shared_libraries(native))

    def test_32_bit_segment(self):
        for order in (HOST, OPPOSITE):
            with self.subTest(order=order):
                sections = [mb.section('__text', '__TEXT', addr=0x1f50, size=0x20, is_64=False, order=order)]
                segment = mb.segment('__TEXT', sections, vmaddr=0x1000, vmsize=0x1000, is_64=False, order=order)
                arch = self._parse_single(mb.mach_image([segment], is_64=False, order=order, cputype=CPU_TYPE_X86))

                command = arch.load_commands[0]
                self.assertIs(type(command), SegmentCommand)
                self.assertEqual(command.cmd, LC_SEGMENT)
                self.assertEqual(command.cmdsize, 56 + 68)
                self.assertEqual(command.vmaddr, 0x1000)
                self.assertEqual(command.sections[0].name, '__text')
                self.assertEqual(command.sections[0].addr, 0x1f50)

    def test_thread_command(self):
        arch = self._parse_single(mb.mach_image([mb.unixthread(4, [0] * 42)]))
        thread = arch.load_commands[0]
        self.assertIsInstance(thread, ThreadCommand)
        self.assertEqual(thread.cmd, LC_UNIXTHREAD)
        self.assertEqual((thread.flavor, thread.count), (4, 42))
        self.assertEqual(thread.cmdsize, 16 + 42 * 4)

    def test_unknown_command_preserved(self):
        raw = mb.raw_command(0x99, b'\x01\x02\x03\x04\x05\x06\x07\x08')
        arch = self._parse_single(mb.mach_image([raw, mb.uuid_command(UUID_BYTES)]))
        unknown, uuid_command = arch.load_commands
        self.assertIsInstance(unknown, UnknownCommand)
        self.assertIsNone(unknown.kind)
        self.assertEqual(unknown.cmd, 0x99)
        self.assertEqual(unknown.cmdsize, 16)
        self.assertEqual(unknown.data, raw)
        self.assertEqual(unknown.command_name, 'UNKNOWN (0x99)')
        self.assertEqual(uuid_command.cmd, LC_UUID)

    def test_dylib_name_clamped_to_command(self):
        """Строка без NUL обрезается по концу команды"""
        dylib = struct.pack(HOST + 'IIIIII', LC_LOAD_DYLIB, 32, 24, 0, 0, 0) + b'libfoo.d'
        arch = self._parse_single(mb.mach_image([dylib, mb.uuid_command(UUID_BYTES)]))
        self.assertEqual(arch.load_commands[0].name, 'libfoo.d')

    def test_dylib_name_offset_past_command(self):
        dylib = struct.pack(HOST + 'IIIIII', LC_LOAD_DYLIB, 24, 40, 0, 0, 0)
        arch = self._parse_single(mb.mach_image([dylib]))
        self.assertEqual(arch.load_commands[0].name, '')

    def test_sizeofcmds_past_end_of_file(self):
        data = mb.mach_image([mb.uuid_command(UUID_BYTES)], sizeofcmds=4096)
        with self.assertRaises(ShortRead):
            parse(mb.write_temp(self, data))

    def test_command_past_block(self):
        """ncmds больше, чем помещается в sizeofcmds"""
        data = mb.mach_image([mb.uuid_command(UUID_BYTES)], ncmds=2)
        with self.assertRaises(ShortRead):
            parse(mb.write_temp(self, data))

    def test_unknown_command_past_block(self):
        """Неизвестная команда, выходящая за sizeofcmds, не обрезается"""
        raw = struct.pack(HOST + 'II', 0x99, 64) + b'\x01' * 8
        with self.assertRaises(ShortRead) as context:
            parse(mb.write_temp(self, mb.mach_image([raw])))
        self.assertEqual(context.exception.expected, 64)
        self.assertEqual(context.exception.actual, 16)

    def test_kind_lookup(self):
        self.assertIs(LoadCommandKind.from_tag(LC_UUID), LoadCommandKind.UUID)
        self.assertIs(LoadCommandKind.from_tag(LC_LOAD_WEAK_DYLIB), LoadCommandKind.LOAD_WEAK_DYLIB)
        self.assertIsNone(LoadCommandKind.from_tag(0x99))

    def test_section_past_block(self):
        segment = bytearray(mb.segment('__TEXT'))
        struct.pack_into(HOST + 'I', segment, 64, 3)
        with self.assertRaises(ShortRead):
            parse(mb.write_temp(self, mb.mach_image([bytes(segment)])))

    def test_size_mismatch_logged(self):
        commands = [mb.uuid_command(UUID_BYTES)]
        data = mb.mach_image(commands, sizeofcmds=32) + b'\x00' * 8
        with self.assertLogs('machodump.core.load_command_parser', level='WARNING') as logs:
            arch = self._parse_single(data)
        self.assertEqual(len(arch.load_commands), 1)
        self.assertIn('sizeofcmds', logs.output[0])

    def test_segment_64_tag(self):
        arch = self._parse_single(mb.mach_image([mb.segment('__DATA')]))
        self.assertEqual(arch.load_commands[0].cmd, LC_SEGMENT_64)

    def test_build_version_tag(self):
        arch = self._parse_single(mb.mach_image([mb.build_version(2, 0x000e0000, 0x000e0000)]))
        build = arch.load_commands[0]
        self.assertEqual(build.cmd, LC_BUILD_VERSION)
        self.assertEqual(build.tools, ())


if __name__ == '__main__':
    unittest.main()
