"""
JSBSim binding configuration

Configures the binding generator for JSBSim::FGFDMExec:
- SGPath parameters and results travel as UTF-8 strings
- Nested PropertyCatalogStructure is qualified through the class
- Output file handling is left out of the ergonomic API
"""

from embind_gen import Generator


# ==============================================================================
# Value Conversions
# ==============================================================================

SGPATH_TO_JS_VALUE = '''inline std::string toJsValue(const SGPath& value) {
  return value.utf8Str();
}'''


# ==============================================================================
# Configuration
# ==============================================================================

def configure(gen: Generator):
    """Configure generator with JSBSim-specific settings"""

    gen.tmp_prefix = 'jsbsim-bindgen-'

    fdm = gen.bind_class('FGFDMExec')
    fdm.namespace = 'JSBSim'
    fdm.header = 'FGFDMExec.h'
    fdm.implementation = 'FGFDMExec.cpp'

    fdm.cpp_output = 'generated/FGFDMExecBindings.cpp'
    fdm.interface_output = 'src/generated/fgfdmexec-api.ts'
    fdm.api_output = 'src/generated/jsbsim-api.ts'
    fdm.interface_name = 'FGFDMExecApi'
    fdm.api_class_name = 'JSBSimApi'
    fdm.bindings_name = 'jsbsim_fgfdmexec_bindings'

    fdm.path_types = ('SGPath',)
    fdm.qualified_names['PropertyCatalogStructure'] = 'JSBSim::FGFDMExec::PropertyCatalogStructure'
    fdm.cpp_usings.append('::SGPath')
    fdm.value_conversions.append(SGPATH_TO_JS_VALUE)

    fdm.ignore(
        'SetOutputFileName',
        'GetOutputFileName',
    )
