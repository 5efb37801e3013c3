from macholib.mach_o import (
    LC_SEGMENT, LC_SEGMENT_64, LC_UUID, LC_DYLD_INFO_ONLY, LC_SYMTAB,
    LC_DYSYMTAB, LC_LOAD_DYLINKER, LC_VERSION_MIN_MACOSX, LC_SOURCE_VERSION,
    LC_MAIN, LC_LOAD_DYLIB, LC_LOAD_WEAK_DYLIB, LC_FUNCTION_STARTS,
    LC_DATA_IN_CODE, LC_UNIXTHREAD, LC_CODE_SIGNATURE, LC_BUILD_VERSION,
    MH_OBJECT, MH_EXECUTE, MH_FVMLIB, MH_CORE, MH_PRELOAD, MH_DYLIB,
    MH_DYLINKER, MH_BUNDLE, MH_DYLIB_STUB, MH_DSYM,
    MH_NOUNDEFS, MH_INCRLINK, MH_DYLDLINK, MH_BINDATLOAD, MH_PREBOUND,
    MH_SPLIT_SEGS, MH_LAZY_INIT, MH_TWOLEVEL, MH_FORCE_FLAT, MH_NOMULTIDEFS,
    MH_NOFIXPREBINDING, MH_PREBINDABLE, MH_ALLMODSBOUND,
    MH_SUBSECTIONS_VIA_SYMBOLS, MH_CANONICAL, MH_WEAK_DEFINES,
    MH_BINDS_TO_WEAK, MH_ALLOW_STACK_EXECUTION, MH_ROOT_SAFE, MH_SETUID_SAFE,
    MH_NO_REEXPORTED_DYLIBS, MH_PIE, MH_DEAD_STRIPPABLE_DYLIB,
    MH_HAS_TLV_DESCRIPTORS, MH_NO_HEAP_EXECUTION, MH_APP_EXTENSION_SAFE,
    SECTION_TYPE, S_REGULAR, S_ZEROFILL, S_CSTRING_LITERALS, S_4BYTE_LITERALS,
    S_8BYTE_LITERALS, S_LITERAL_POINTERS, S_NON_LAZY_SYMBOL_POINTERS,
    S_LAZY_SYMBOL_POINTERS, S_SYMBOL_STUBS, S_MOD_INIT_FUNC_POINTERS,
    S_MOD_TERM_FUNC_POINTERS, S_COALESCED, S_GB_ZEROFILL, S_INTERPOSING,
    S_16BYTE_LITERALS, S_DTRACE_DOF, S_LAZY_DYLIB_SYMBOL_POINTERS,
    S_THREAD_LOCAL_REGULAR, S_THREAD_LOCAL_ZEROFILL, S_THREAD_LOCAL_VARIABLES,
    S_THREAD_LOCAL_VARIABLE_POINTERS, S_THREAD_LOCAL_INIT_FUNCTION_POINTERS,
    S_ATTR_PURE_INSTRUCTIONS, S_ATTR_NO_TOC, S_ATTR_STRIP_STATIC_SYMS,
    S_ATTR_NO_DEAD_STRIP, S_ATTR_LIVE_SUPPORT, S_ATTR_SELF_MODIFYING_CODE,
    S_ATTR_DEBUG, S_ATTR_SOME_INSTRUCTIONS, S_ATTR_EXT_RELOC, S_ATTR_LOC_RELOC,
    CPU_TYPE_NAMES,
)

# Magic Numbers (в порядке байт хоста)
MH_MAGIC = 0xFEEDFACE      # 32-bit, порядок хоста
MH_CIGAM = 0xCEFAEDFE      # 32-bit, обратный порядок
MH_MAGIC_64 = 0xFEEDFACF   # 64-bit, порядок хоста
MH_CIGAM_64 = 0xCFFAEDFE   # 64-bit, обратный порядок
FAT_MAGIC = 0xCAFEBABE
FAT_CIGAM = 0xBEBAFECA
FAT_MAGIC_64 = 0xCAFEBABF
FAT_CIGAM_64 = 0xBFBAFECA

SWAPPED_MAGICS = (MH_CIGAM, MH_CIGAM_64, FAT_CIGAM, FAT_CIGAM_64)
FAT_MAGICS = (FAT_MAGIC, FAT_CIGAM, FAT_MAGIC_64, FAT_CIGAM_64)

MAGIC_NAMES = {
    MH_MAGIC: "MH_MAGIC",
    MH_CIGAM: "MH_CIGAM",
    MH_MAGIC_64: "MH_MAGIC_64",
    MH_CIGAM_64: "MH_CIGAM_64",
    FAT_MAGIC: "FAT_MAGIC",
    FAT_CIGAM: "FAT_CIGAM",
    FAT_MAGIC_64: "FAT_MAGIC_64",
    FAT_CIGAM_64: "FAT_CIGAM_64",
}

# CPU Type константы
CPU_ARCH_ABI64 = 0x01000000
CPU_ARCH_ABI64_32 = 0x02000000
CPU_TYPE_ARM = 0xc
CPU_TYPE_ARM64 = CPU_TYPE_ARM | CPU_ARCH_ABI64
CPU_TYPE_ARM64_32 = CPU_TYPE_ARM | CPU_ARCH_ABI64_32
CPU_TYPE_X86 = 0x7
CPU_TYPE_X86_64 = CPU_TYPE_X86 | CPU_ARCH_ABI64
CPU_TYPE_POWERPC = 18
CPU_TYPE_POWERPC64 = CPU_TYPE_POWERPC | CPU_ARCH_ABI64

CPU_SUBTYPE_MASK = 0xff000000

CPU_TYPES = {
    CPU_TYPE_X86: "x86",
    CPU_TYPE_X86_64: "x86_64",
    CPU_TYPE_ARM: "arm",
    CPU_TYPE_ARM64: "arm64",
    CPU_TYPE_ARM64_32: "arm64_32",
    CPU_TYPE_POWERPC: "powerpc",
    CPU_TYPE_POWERPC64: "powerpc64",
}

FILE_TYPES = {
    MH_OBJECT: "Object",
    MH_EXECUTE: "Executable",
    MH_FVMLIB: "Fixed VM Library",
    MH_CORE: "Core",
    MH_PRELOAD: "Preloaded",
    MH_DYLIB: "Dynamic Library",
    MH_DYLINKER: "Dynamic Linker",
    MH_BUNDLE: "Bundle",
    MH_DYLIB_STUB: "Dynamic Library Stub",
    MH_DSYM: "Debug Symbols",
}

HEADER_FLAGS = (
    (MH_NOUNDEFS, "MH_NOUNDEFS"),
    (MH_INCRLINK, "MH_INCRLINK"),
    (MH_DYLDLINK, "MH_DYLDLINK"),
    (MH_BINDATLOAD, "MH_BINDATLOAD"),
    (MH_PREBOUND, "MH_PREBOUND"),
    (MH_SPLIT_SEGS, "MH_SPLIT_SEGS"),
    (MH_LAZY_INIT, "MH_LAZY_INIT"),
    (MH_TWOLEVEL, "MH_TWOLEVEL"),
    (MH_FORCE_FLAT, "MH_FORCE_FLAT"),
    (MH_NOMULTIDEFS, "MH_NOMULTIDEFS"),
    (MH_NOFIXPREBINDING, "MH_NOFIXPREBINDING"),
    (MH_PREBINDABLE, "MH_PREBINDABLE"),
    (MH_ALLMODSBOUND, "MH_ALLMODSBOUND"),
    (MH_SUBSECTIONS_VIA_SYMBOLS, "MH_SUBSECTIONS_VIA_SYMBOLS"),
    (MH_CANONICAL, "MH_CANONICAL"),
    (MH_WEAK_DEFINES, "MH_WEAK_DEFINES"),
    (MH_BINDS_TO_WEAK, "MH_BINDS_TO_WEAK"),
    (MH_ALLOW_STACK_EXECUTION, "MH_ALLOW_STACK_EXECUTION"),
    (MH_ROOT_SAFE, "MH_ROOT_SAFE"),
    (MH_SETUID_SAFE, "MH_SETUID_SAFE"),
    (MH_NO_REEXPORTED_DYLIBS, "MH_NO_REEXPORTED_DYLIBS"),
    (MH_PIE, "MH_PIE"),
    (MH_DEAD_STRIPPABLE_DYLIB, "MH_DEAD_STRIPPABLE_DYLIB"),
    (MH_HAS_TLV_DESCRIPTORS, "MH_HAS_TLV_DESCRIPTORS"),
    (MH_NO_HEAP_EXECUTION, "MH_NO_HEAP_EXECUTION"),
    (MH_APP_EXTENSION_SAFE, "MH_APP_EXTENSION_SAFE"),
)

SECTION_ATTRIBUTES = 0xffffff00

SECTION_TYPES = {
    S_REGULAR: "REGULAR",
    S_ZEROFILL: "ZEROFILL",
    S_CSTRING_LITERALS: "CSTRING_LITERALS",
    S_4BYTE_LITERALS: "4BYTE_LITERALS",
    S_8BYTE_LITERALS: "8BYTE_LITERALS",
    S_LITERAL_POINTERS: "LITERAL_POINTERS",
    S_NON_LAZY_SYMBOL_POINTERS: "NON_LAZY_SYMBOL_POINTERS",
    S_LAZY_SYMBOL_POINTERS: "LAZY_SYMBOL_POINTERS",
    S_SYMBOL_STUBS: "SYMBOL_STUBS",
    S_MOD_INIT_FUNC_POINTERS: "MOD_INIT_FUNC_POINTERS",
    S_MOD_TERM_FUNC_POINTERS: "MOD_TERM_FUNC_POINTERS",
    S_COALESCED: "COALESCED",
    S_GB_ZEROFILL: "GB_ZEROFILL",
    S_INTERPOSING: "INTERPOSING",
    S_16BYTE_LITERALS: "16BYTE_LITERALS",
    S_DTRACE_DOF: "DTRACE_DOF",
    S_LAZY_DYLIB_SYMBOL_POINTERS: "LAZY_DYLIB_SYMBOL_POINTERS",
    S_THREAD_LOCAL_REGULAR: "THREAD_LOCAL_REGULAR",
    S_THREAD_LOCAL_ZEROFILL: "THREAD_LOCAL_ZEROFILL",
    S_THREAD_LOCAL_VARIABLES: "THREAD_LOCAL_VARIABLES",
    S_THREAD_LOCAL_VARIABLE_POINTERS: "THREAD_LOCAL_VARIABLE_POINTERS",
    S_THREAD_LOCAL_INIT_FUNCTION_POINTERS: "THREAD_LOCAL_INIT_FUNCTION_POINTERS",
}

SECTION_FLAGS = (
    (S_ATTR_PURE_INSTRUCTIONS, "PURE_INSTRUCTIONS"),
    (S_ATTR_NO_TOC, "NO_TOC"),
    (S_ATTR_STRIP_STATIC_SYMS, "STRIP_STATIC_SYMS"),
    (S_ATTR_NO_DEAD_STRIP, "NO_DEAD_STRIP"),
    (S_ATTR_LIVE_SUPPORT, "LIVE_SUPPORT"),
    (S_ATTR_SELF_MODIFYING_CODE, "SELF_MODIFYING_CODE"),
    (S_ATTR_DEBUG, "DEBUG"),
    (S_ATTR_SOME_INSTRUCTIONS, "SOME_INSTRUCTIONS"),
    (S_ATTR_EXT_RELOC, "EXT_RELOC"),
    (S_ATTR_LOC_RELOC, "LOC_RELOC"),
)

# Защита памяти сегмента
VM_PROT_READ = 0x1
VM_PROT_WRITE = 0x2
VM_PROT_EXECUTE = 0x4

PLATFORMS = {
    1: "macOS",
    2: "iOS",
    3: "tvOS",
    4: "watchOS",
    5: "bridgeOS",
    6: "Mac Catalyst",
    7: "iOS Simulator",
    8: "tvOS Simulator",
    9: "watchOS Simulator",
    10: "DriverKit",
    11: "visionOS",
    12: "visionOS Simulator",
}

BUILD_TOOLS = {
    1: "clang",
    2: "swift",
    3: "ld",
    4: "lld",
}
