# Mrs
# Copyright 2008-2012 Brigham Young University
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Declarative parameters and the option parser that exposes them.

A ParamObj subclass declares its settings in a `_params` dict of Param
objects.  Subclasses inherit the parameters of their bases and may refine
any of them.  An option with action='extend' names a ParamObj class on the
command line, and the parser then offers one option per parameter of that
class, such as --mrs-workers for the workers parameter of Parallel.
"""

import optparse
import sys


class ParamError(Exception):
    """Raised for a keyword that is not a parameter of the class."""

    def __init__(self, clsname, paramname):
        super(ParamError, self).__init__(clsname, paramname)
        self.clsname = clsname
        self.paramname = paramname

    def __str__(self):
        return 'Class %s has no parameter "%s"' % self.args


# Marks a field left for the base class (or the default) to fill in; None is
# a legitimate override.
Unset = object()

PARAM_FIELDS = ('default', 'type', 'doc', 'shortopt')
FIELD_DEFAULTS = {'default': None, 'type': 'string', 'doc': None,
        'shortopt': None}


class Param(object):
    """One setting of a ParamObj.

    Attributes:
        default: value used when no option is given.
        type: optparse type of the option ('string', 'int', ...) or 'bool'.
            A bool that defaults to False gets a flag that sets it; one that
            defaults to True gets a "--no-" flag that clears it.
        doc: help text.
        shortopt: optional short option string, e.g. '-N'.
    """
    def __init__(self, default=Unset, type=Unset, doc=Unset, shortopt=Unset):
        self.default = default
        self.type = type
        self.doc = doc
        self.shortopt = shortopt

    def refine(self, base):
        """Returns a copy whose unset fields are taken from `base`."""
        fields = {}
        for field in PARAM_FIELDS:
            value = getattr(self, field)
            fields[field] = getattr(base, field) if value is Unset else value
        return Param(**fields)

    def finalize(self):
        """Fills unset fields with defaults and checks the result."""
        for field in PARAM_FIELDS:
            if getattr(self, field) is Unset:
                setattr(self, field, FIELD_DEFAULTS[field])
        if self.type == 'bool':
            self.default = bool(self.default)
        return self


def collect_params(bases, own):
    """Merges the `_params` of base classes with a class's own params."""
    merged = {}
    for base in reversed(bases):
        merged.update(getattr(base, '_params', {}))
    for name, param in own.items():
        if name in merged:
            param = param.refine(merged[name])
        merged[name] = param
    return dict((name, param.finalize()) for name, param in merged.items())


class _ParamMeta(type):
    """Builds the complete `_params` of each ParamObj class.

    The parameter list is appended to the class docstring.
    """
    def __new__(mcs, classname, bases, classdict):
        params = collect_params(bases, classdict.get('_params', {}))
        classdict['_params'] = params

        lines = [classdict.get('__doc__') or classname, '',
                '%s parameters:' % classname]
        for name in sorted(params):
            lines.append('    %s: %s (default=%s)'
                    % (name, params[name].doc, params[name].default))
        classdict['__doc__'] = '\n'.join(lines)
        return super(_ParamMeta, mcs).__new__(mcs, classname, bases,
                classdict)


class ParamObj(metaclass=_ParamMeta):
    """An object with one attribute per declared parameter.

    >>> from mrcount.main import Parallel
    >>> impl = Parallel(workers=3)
    >>> impl.workers
    3
    >>> impl.reduce_tasks
    1
    >>>
    """
    def __init__(self, **kwds):
        unknown = set(kwds) - set(self._params)
        if unknown:
            raise ParamError(self.__class__.__name__, min(unknown))
        for name, param in self._params.items():
            setattr(self, name, kwds.get(name, param.default))


def import_object(name):
    """Returns the module, or the attribute of a module, named by `name`.

    >>> import_object('optparse.OptionParser') is optparse.OptionParser
    True
    """
    try:
        __import__(name)
        return sys.modules[name]
    except ImportError as e:
        # Only a missing `name` itself means it may be an attribute.
        if '.' not in name or e.name not in (None, name):
            raise

    module_name, attr = name.rsplit('.', 1)
    __import__(module_name)
    try:
        return getattr(sys.modules[module_name], attr)
    except AttributeError:
        raise ImportError('No attribute named %s' % attr)


def instantiate(opts, name):
    """Creates an instance of the ParamObj class selected by `opts.<name>`.

    Every `<name>__<param>` attribute of opts becomes a parameter value.

    >>> opts = optparse.Values()
    >>> opts.mrs = 'mrcount.main.Parallel'
    >>> opts.mrs__workers = 7
    >>> instantiate(opts, 'mrs').workers
    7
    """
    obj = import_object(getattr(opts, name))()
    prefix = name + '__'
    for attr, value in vars(opts).items():
        if attr.startswith(prefix):
            setattr(obj, attr[len(prefix):], value)
    return obj


def param_dest(attr, prefix=''):
    return '%s__%s' % (prefix, attr) if prefix else attr


def add_param_option(container, attr, param, prefix=''):
    """Adds the option for one Param to a parser or option group."""
    flag = attr.replace('_', '-')
    if param.type == 'bool' and param.default:
        flag = 'no-' + flag
    if prefix:
        flag = '%s-%s' % (prefix, flag)

    option_strings = ['--' + flag]
    if param.shortopt:
        option_strings.append(param.shortopt)

    kwds = dict(dest=param_dest(attr, prefix), default=param.default,
            help='%s (default=%s)' % (param.doc, param.default))
    if param.type == 'bool':
        kwds['action'] = 'store_false' if param.default else 'store_true'
    else:
        kwds.update(action='store', type=param.type, metavar=attr.upper())
    return container.add_option(*option_strings, **kwds)


class OptionParser(optparse.OptionParser):
    """An optparse.OptionParser that understands action='extend'.

    The value of an extend option is the name of a ParamObj class, looked up
    first in each module of the option's `search` list and then as a full
    dotted name.  The option's dest receives the full name of the class, and
    the parser gains a group of options for the class's parameters, named
    after the option (e.g. --mrs-reduce-tasks).  Hyphens in these option
    names stand for underscores in the parameter names.
    """

    def __init__(self, **kwds):
        kwds['option_class'] = _Option
        optparse.OptionParser.__init__(self, **kwds)

    def get_default_values(self):
        values = optparse.OptionParser.get_default_values(self)
        for option in self._get_all_options():
            if option.action == 'extend':
                option.select(option.get_opt_string(),
                        getattr(values, option.dest), values, self)
        return values

    def add_param_object(self, param_obj, prefix='', values=None):
        """Adds a group with the options of a ParamObj class.

        If `values` is given, the parameter defaults are stored in it.
        """
        group = optparse.OptionGroup(self,
                '%s (%s)' % (param_obj.__name__, prefix))
        self.add_option_group(group)
        for attr in sorted(param_obj._params):
            param = param_obj._params[attr]
            add_param_option(group, attr, param, prefix)
            if values is not None:
                setattr(values, param_dest(attr, prefix), param.default)
        return group


class _Option(optparse.Option):
    """An optparse.Option with the extend action and a `search` attribute."""
    ACTIONS = optparse.Option.ACTIONS + ('extend',)
    STORE_ACTIONS = optparse.Option.STORE_ACTIONS + ('extend',)
    TYPED_ACTIONS = optparse.Option.TYPED_ACTIONS + ('extend',)
    ALWAYS_TYPED_ACTIONS = optparse.Option.ALWAYS_TYPED_ACTIONS + ('extend',)
    ATTRS = optparse.Option.ATTRS + ['search']

    # Options added for the selected class.
    group = None
    # Whether the option appeared on the command line.
    seen = False

    def take_action(self, action, dest, opt, value, values, parser):
        if action == 'extend':
            if self.seen:
                raise optparse.OptionValueError(
                        'Option cannot be specified twice')
            self.select(opt, value, values, parser)
        else:
            optparse.Option.take_action(self, action, dest, opt, value,
                    values, parser)
        self.seen = True

    def lookup(self, value):
        """Returns the ParamObj class named by value, or None."""
        names = ['%s.%s' % (module, value) for module in self.search or ()]
        names.append(value)
        for name in names:
            try:
                return import_object(name)
            except ImportError:
                pass
        return None

    def select(self, opt_str, value, values, parser):
        """Selects the class named by `value` and installs its options."""
        if value is None:
            return

        cls = self.lookup(value)
        if cls is None:
            raise optparse.OptionValueError(
                    'option %s: Could not find "%s" in the search path'
                    % (opt_str, value))
        if not (isinstance(cls, type) and issubclass(cls, ParamObj)):
            raise optparse.OptionValueError(
                    'option %s: %s is not an implementation'
                    % (opt_str, value))
        setattr(values, self.dest, '%s.%s' % (cls.__module__, cls.__name__))

        self.drop_group(parser)
        if cls._params:
            if self._long_opts:
                prefix = self._long_opts[0][2:]
            else:
                prefix = self._short_opts[0][1:]
            self.group = parser.add_param_object(cls, prefix, values)

    def drop_group(self, parser):
        """Removes the options of the previously selected class."""
        if self.group is None:
            return
        for option in list(self.group.option_list):
            if option.seen:
                raise optparse.OptionValueError(
                        'Option cannot be set after its suboptions')
            parser.remove_option(option.get_opt_string())
        parser.option_groups.remove(self.group)
        self.group = None


__all__ = ['ParamObj', 'Param', 'ParamError', 'OptionParser', 'instantiate']

# vim: et sw=4 sts=4
