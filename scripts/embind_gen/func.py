"""
Method binding generation module

Generates the value-safe C++ wrapper functions that embind registers in
place of the class's own member functions.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen

if TYPE_CHECKING:
    from .ir import MethodInfo
    from .types import TypeConverter


# toJsValue overloads shared by all wrappers
TO_JS_VALUE_PREAMBLE = '''template <typename T>
std::enable_if_t<std::is_arithmetic_v<T>, T> toJsValue(T value) {
  return value;
}

inline std::string toJsValue(const std::string& value) {
  return value;
}

inline std::string toJsValue(std::string&& value) {
  return std::move(value);
}

inline emscripten::val toJsValue(const std::vector<std::string>& values) {
  emscripten::val out = emscripten::val::array();
  for (std::size_t i = 0; i < values.size(); ++i) {
    out.set(i, values[i]);
  }
  return out;
}

inline emscripten::val toJsValue(std::vector<std::string>& values) {
  return toJsValue(static_cast<const std::vector<std::string>&>(values));
}

template <typename T>
uintptr_t toJsValue(T* value) {
  return reinterpret_cast<uintptr_t>(value);
}

template <typename T>
uintptr_t toJsValue(const std::shared_ptr<T>& value) {
  return reinterpret_cast<uintptr_t>(value.get());
}

template <typename T>
uintptr_t toJsValue(const std::unique_ptr<T>& value) {
  return reinterpret_cast<uintptr_t>(value.get());
}

template <typename T>
uintptr_t toJsValue(T& value) {
  return reinterpret_cast<uintptr_t>(&value);
}'''


class FuncGenerator:
    """Generates wrapper functions for class methods"""

    def __init__(self, type_conv: 'TypeConverter', class_name: str):
        self.type_conv = type_conv
        self.class_name = class_name

    def wrapper_name(self, method: 'MethodInfo', index: int) -> str:
        """Index keeps overload wrappers apart"""
        return f'wrap_{self.class_name}_{method.name}_{index}'

    def generate(self, method: 'MethodInfo', index: int, gen: CodeGen):
        """Generate wrapper for a method"""
        params = ''.join(
            f', {self.type_conv.cpp_param_type(p.type)} {p.name}' for p in method.params
        )
        args = ', '.join(self.type_conv.cpp_arg(p.type, p.name) for p in method.params)
        invoke = f'self.{method.name}({args})'
        result_type = 'void' if method.return_type == 'void' else 'auto'

        with gen.block(f'static {result_type} {self.wrapper_name(method, index)}({self.class_name}& self{params}) {{'):
            if method.return_type == 'void':
                gen.line(f'{invoke};')
            else:
                gen.line(f'return {self.type_conv.cpp_result(method.return_type, invoke)};')
        gen.line()

    def generate_registration(self, methods: list['MethodInfo'], module_name: str, gen: CodeGen):
        """Generate the EMSCRIPTEN_BINDINGS block"""
        with gen.block(f'EMSCRIPTEN_BINDINGS({module_name}) {{'):
            gen.line(f'emscripten::class_<{self.class_name}>("{self.class_name}")')
            gen.indent()
            entries = ['.constructor<>()']
            entries.extend(f'.function("{m.name}", &{self.wrapper_name(m, i)})'
                           for i, m in enumerate(methods))
            entries[-1] += ';'
            gen.lines(*entries)
            gen.dedent()
