import argparse
import sys
import traceback

import ddcci_brightness as DDC
from ddcci_brightness.exceptions import format_exc


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog='ddcci_brightness')
    parser.add_argument('-d', '--display', help='the model name of the display to be used')
    parser.add_argument('-g', '--get', action='store_true', help='get the current screen brightness')
    parser.add_argument('-s', '--set', type=int, help='set the brightness to this value', metavar='VALUE')
    parser.add_argument('-r', '--raise', dest='raise_by', type=int, help='raise the brightness by this much', metavar='BY')
    parser.add_argument('-L', '--lower', dest='lower_by', type=int, help='lower the brightness by this much', metavar='BY')
    parser.add_argument(
        '-m', '--min', type=int, dest='floor', metavar='FLOOR',
        help=f'never set the brightness lower than this (default: {DDC.config.MIN_BRIGHTNESS})'
    )
    parser.add_argument('-l', '--list', action='store_true', help='list all monitors')
    parser.add_argument('-v', '--verbose', action='store_true', help='some messages will be more detailed')
    parser.add_argument('-V', '--version', action='store_true', help='print the current version')

    args = parser.parse_args(argv)

    # only pass what was given so that the `config` defaults still apply
    display_kw = {'display': args.display} if args.display is not None else {}
    kw = dict(display_kw)
    if args.floor is not None:
        kw['floor'] = args.floor

    name = args.display or 'Display'
    try:
        if args.get:
            print(f'{name}: {DDC.get_brightness(**display_kw)}%')
        elif args.set is not None:
            print(f'{name} -> {DDC.set_brightness(args.set, **kw)}%')
        elif args.raise_by is not None:
            print(f'{name} -> {DDC.raise_brightness(args.raise_by, **kw)}%')
        elif args.lower_by is not None:
            print(f'{name} -> {DDC.lower_brightness(args.lower_by, **kw)}%')
        elif args.version:
            print(DDC.__version__)
        elif args.list:
            monitors = DDC.list_monitors_info()
            if len(monitors) == 0:
                print('No monitors detected')
            for index, monitor in enumerate(monitors):
                if not args.verbose:
                    print(f'Display {index}: {monitor.model_name}')
                    continue
                print(
                    f'Display {index}:\n\t'
                    f'Name: {monitor.model_name}\n\t'
                    f'Manufacturer ID: {monitor.manufacturer_id}\n\t'
                    f'Serial: {monitor.serial}\n\t'
                    f'Source: {monitor.source}'
                )
        else:
            print('No valid arguments')
    except Exception as e:
        if args.verbose:
            print(f'{name}: Failed\n{traceback.format_exc()}', file=sys.stderr)
        else:
            print(f'{name}: Failed - {format_exc(e)}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
