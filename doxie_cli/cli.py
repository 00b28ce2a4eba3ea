import argparse
from ipaddress import IPv4Address
import logging
from pathlib import Path
import sys

from prettytable import PrettyTable

from doxie_cli import __version__, config
from doxie_cli.config import DiscoveryConfiguration
from doxie_cli.discovery import discover_doxie
from doxie_cli.images import save_image
from doxie_cli.utils import DoxieCliException


MODE_DESCRIPTIONS = {
    'AP': "Doxie's own Wi-Fi network",
    'Client': 'Doxie has joined an existing Wi-Fi network',
}


class DoxieCli:
    def __init__(self, args) -> None:
        configuration = DiscoveryConfiguration(static_ip_address=args.ip, port=args.port)
        self._doxie = discover_doxie(configuration)
        if args.auth:
            self._doxie.password = args.auth

    @staticmethod
    def split_names_argument(arg):
        return [name.strip() for name in arg.split(',') if name.strip()]

    def hello(self, _):
        doxie = self._doxie
        extra_status = doxie.extra_status()

        print(f'Name: {doxie.name}')
        print(f'Model: {doxie.model}')
        print(f'Has password: {doxie.has_password}')
        print(f'Wi-Fi firmware: {doxie.firmware_wifi}')
        print(f'Scanner firmware: {extra_status.firmware}')
        print(f'External power: {extra_status.connected_to_external_power}')
        print(f'MAC: {doxie.mac}')
        if doxie.mode in MODE_DESCRIPTIONS:
            print(f'Mode: {doxie.mode} ({MODE_DESCRIPTIONS[doxie.mode]})')
        if doxie.mode == 'Client':
            print(f'Network: {doxie.network}')
            print(f'IP address: {doxie.ip_address}')
        print(f'URL: {doxie.url}')

    def scans(self, _):
        table = PrettyTable()
        table.field_names = ['Name', 'Size', 'Modified']
        for item in self._doxie.scans():
            table.add_row([item.name, item.size, item.modified])

        if table.rows:
            print(table)
        else:
            print('No scans')

    def recent(self, _):
        print(self._doxie.recent() or 'No recent scan')

    def delete(self, args):
        self._doxie.delete(*args.names)
        print(f'Deleted {", ".join(args.names)}')

    @staticmethod
    def _get_output_path(args, name) -> Path:
        output_dir = Path(args.output_dir or '.')
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir / name

    def get_scan(self, args):
        save_image(self._doxie.scan(args.name), self._get_output_path(args, args.name))
        print(f'Downloaded scan {args.name}')

    def get_thumbnail(self, args):
        save_image(self._doxie.thumbnail(args.name), self._get_output_path(args, args.name))
        print(f'Downloaded thumbnail {args.name}')

    def get_scans(self, args):
        for item in self._doxie.scans():
            save_image(self._doxie.scan(item.name), self._get_output_path(args, item.name))
            print(f'Downloaded scan {item.name}')

    def restart(self, _):
        self._doxie.restart()
        print('Restarting Wi-Fi')


def _parse_args(argv=None):
    main_parser = argparse.ArgumentParser(prog='doxie-cli',
                                          epilog='For more information about a given command, use "<command> -h"')
    main_parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument('--verbose', '-v', action='store_true', help='Verbose mode')
    common_parser.add_argument('--auth', metavar='PASSWORD', help='Password to authenticate with the scanner')
    common_parser.add_argument('--ip', type=IPv4Address,
                               help='Static IP address of the scanner, skipping the discovered one')
    common_parser.add_argument('--port', type=int, default=config.default_port, help='Scanner port')

    download_parser = argparse.ArgumentParser(add_help=False)
    download_parser.add_argument('--output-dir', help='Output directory. Defaults to the current directory')

    subparsers = main_parser.add_subparsers(dest='command', required=True)

    subparser = subparsers.add_parser('hello', parents=[common_parser], help='Find Doxie on the Wi-Fi network')
    subparser.set_defaults(func=DoxieCli.hello)

    subparser = subparsers.add_parser('scans', parents=[common_parser], help='List all scans on the scanner')
    subparser.set_defaults(func=DoxieCli.scans)

    subparser = subparsers.add_parser('recent', parents=[common_parser], help='Show the most recent scan')
    subparser.set_defaults(func=DoxieCli.recent)

    subparser = subparsers.add_parser('delete', parents=[common_parser], help='Delete scans from the scanner')
    subparser.set_defaults(func=DoxieCli.delete)
    subparser.add_argument('names', type=DoxieCli.split_names_argument,
                           help='Comma separated scan names. E.g.: "img_0001.jpg,img_0002.jpg"')

    subparser = subparsers.add_parser('get-scan', parents=[common_parser, download_parser],
                                      help='Download a scan')
    subparser.set_defaults(func=DoxieCli.get_scan)
    subparser.add_argument('name', help='The scan name')

    subparser = subparsers.add_parser('get-thumbnail', parents=[common_parser, download_parser],
                                      help='Download the thumbnail of a scan')
    subparser.set_defaults(func=DoxieCli.get_thumbnail)
    subparser.add_argument('name', help='The scan name')

    subparser = subparsers.add_parser('get-scans', parents=[common_parser, download_parser],
                                      help='Download all scans')
    subparser.set_defaults(func=DoxieCli.get_scans)

    subparser = subparsers.add_parser('restart', parents=[common_parser], help="Restart the scanner's Wi-Fi")
    subparser.set_defaults(func=DoxieCli.restart)

    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        main_parser.print_help()
        sys.exit(1)

    return main_parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        cli = DoxieCli(args)
        args.func(cli, args)
    except (DoxieCliException, OSError) as e:
        print(e)
        sys.exit(1)


if __name__ == '__main__':
    main()
