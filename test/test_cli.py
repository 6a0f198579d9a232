#! /usr/bin/env python

import io
import os
import shutil
import tempfile
import unittest
import xml.dom.minidom
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

import xacro_parser
from xacro_parser import color
from xacro_parser.cli import load_mappings, make_config, process_args


class TestProcessArgs(unittest.TestCase):

    def test_load_mappings(self):
        self.assertEqual(load_mappings(['a:=1', 'b := 2', '_param:=3', '__ns:=4', 'c:=d:=e', 'x']),
                         {'a': '1', 'b': '2', '__ns': '4', 'c': 'd:=e'})

    def test_defaults(self):
        opts, input_file = process_args(['robot.xacro'])
        self.assertEqual(input_file, 'robot.xacro')
        self.assertIsNone(opts.in_order)
        self.assertIsNone(opts.verbosity)
        self.assertIsNone(opts.output)
        self.assertFalse(opts.just_deps)
        self.assertEqual(opts.mappings, {})

    def test_flags(self):
        opts, _ = process_args(['--legacy', '--permissive', '--global-properties',
                                '--working-path', 'http://host/', '--deps',
                                '-o', 'out.urdf', 'robot.xacro', 'arg:=value'])
        self.assertFalse(opts.in_order)
        self.assertFalse(opts.require_prefix)
        self.assertFalse(opts.local_properties)
        self.assertEqual(opts.working_path, 'http://host/')
        self.assertTrue(opts.just_deps)
        self.assertEqual(opts.output, 'out.urdf')
        self.assertEqual(opts.mappings, {'arg': 'value'})

    def test_inorder(self):
        opts, _ = process_args(['-i', 'robot.xacro'])
        self.assertTrue(opts.in_order)

    def test_verbosity(self):
        self.assertEqual(process_args(['-q', 'robot.xacro'])[0].verbosity, 0)
        self.assertEqual(process_args(['-v', 'robot.xacro'])[0].verbosity, 2)
        self.assertEqual(process_args(['-v', '-v', 'robot.xacro'])[0].verbosity, 3)
        self.assertEqual(process_args(['--verbosity', '2', 'robot.xacro'])[0].verbosity, 2)

    def test_missing_input(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                process_args([])
        self.assertEqual(cm.exception.code, 2)
        opts, input_file = process_args([], require_input=False)
        self.assertIsNone(input_file)

    def test_make_config(self):
        opts, _ = process_args(['--legacy', '-q', 'robot.xacro', 'a:=1'])
        config = make_config(opts)
        self.assertFalse(config.in_order)
        self.assertEqual(config.verbosity, 0)
        self.assertTrue(config.require_prefix)
        self.assertEqual(config.mappings, {'a': '1'})

    def test_make_config_from_file(self):
        tmp = tempfile.mkdtemp()
        try:
            path = os.path.join(tmp, 'config.yaml')
            with open(path, 'w') as f:
                f.write('in_order: false\nrequire_prefix: false\nmappings:\n  a: file\n  b: file\n')
            opts, _ = process_args(['--config', path, '--inorder', 'robot.xacro', 'a:=cmdline'])
            config = make_config(opts)
        finally:
            shutil.rmtree(tmp)
        self.assertTrue(config.in_order)
        self.assertFalse(config.require_prefix)
        self.assertEqual(config.mappings, {'a': 'cmdline', 'b': 'file'})


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.write('robot.xacro', '''<robot name="r" xmlns:xacro="http://www.ros.org/wiki/xacro">
  <xacro:include filename="parts/wheel.xacro"/>
  <xacro:arg name="side" default="left"/>
  <xacro:wheel name="$(arg side)"/>
</robot>''')
        self.write('parts/wheel.xacro', '''<robot xmlns:xacro="http://www.ros.org/wiki/xacro">
  <xacro:include filename="radius.xacro"/>
  <xacro:macro name="wheel" params="name">
    <link name="${name}_wheel" radius="${radius}"/>
  </xacro:macro>
</robot>''')
        self.write('parts/radius.xacro', '''<robot xmlns:xacro="http://www.ros.org/wiki/xacro">
  <xacro:property name="radius" value="0.3" scope="global"/>
</robot>''')

    def tearDown(self):
        shutil.rmtree(self.tmp)
        color.set_verbosity(1)

    def write(self, name, content):
        path = os.path.join(self.tmp, name)
        if not os.path.isdir(os.path.dirname(path)):
            os.makedirs(os.path.dirname(path))
        with open(path, 'w') as f:
            f.write(content)
        return path

    def run_main(self, *args):
        stdout, stderr = io.StringIO(), io.StringIO()
        with mock.patch('sys.argv', ['xacro_parser'] + list(args)):
            with redirect_stdout(stdout), redirect_stderr(stderr):
                xacro_parser.main()
        return stdout.getvalue(), stderr.getvalue()

    def test_output_file(self):
        output = os.path.join(self.tmp, 'out', 'robot.urdf')
        self.run_main(os.path.join(self.tmp, 'robot.xacro'), '-o', output, 'side:=right')
        with open(output) as f:
            text = f.read()
        self.assertIn('autogenerated by xacro_parser', text)
        doc = xml.dom.minidom.parseString(text)
        link = doc.getElementsByTagName('link')[0]
        self.assertEqual(link.getAttribute('name'), 'right_wheel')
        self.assertEqual(link.getAttribute('radius'), '0.3')
        self.assertFalse(doc.documentElement.hasAttribute('xmlns:xacro'))

    def test_stdout(self):
        out, _ = self.run_main(os.path.join(self.tmp, 'robot.xacro'))
        doc = xml.dom.minidom.parseString(out)
        self.assertEqual(doc.getElementsByTagName('link')[0].getAttribute('name'), 'left_wheel')

    def test_deps(self):
        out, _ = self.run_main(os.path.join(self.tmp, 'robot.xacro'), '--deps')
        base = self.tmp + '/'
        self.assertEqual(out.split(), [base + 'parts/wheel.xacro', base + 'parts/radius.xacro'])

    def test_legacy_processing(self):
        out, err = self.run_main(os.path.join(self.tmp, 'robot.xacro'), '--legacy')
        self.assertIn('local properties are not supported', err)
        doc = xml.dom.minidom.parseString(out)
        self.assertEqual(doc.getElementsByTagName('link')[0].getAttribute('radius'), '0.3')

    def test_malformed_input(self):
        path = self.write('broken.xacro', '<robot><link></robot>')
        with self.assertRaises(SystemExit) as cm:
            self.run_main(path)
        self.assertEqual(cm.exception.code, 2)

    def test_missing_input(self):
        with self.assertRaises(SystemExit) as cm:
            self.run_main(os.path.join(self.tmp, 'nonexistent.xacro'))
        self.assertEqual(cm.exception.code, 2)

    def test_invalid_config(self):
        config = self.write('config.yaml', 'unknown_option: 1\n')
        with self.assertRaises(SystemExit) as cm:
            self.run_main('--config', config, os.path.join(self.tmp, 'robot.xacro'))
        self.assertEqual(cm.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
