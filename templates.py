import os


class Templates:
    def __init__(self, path):
        self._templates = dict()

        for uilang in os.listdir(path):
            uilang_path = os.path.join(path, uilang)
            if not os.path.isdir(uilang_path):
                continue

            self._templates[uilang] = {}
            for item in os.listdir(uilang_path):
                template_path = os.path.join(uilang_path, item)
                if os.path.isfile(template_path):
                    with open(template_path, 'r', encoding='utf-8') as file:
                        tname = os.path.splitext(item)[0]
                        self._templates[uilang][tname] = file.read()

    def get_template(self, uilang: str, template_name: str) -> str:
        if uilang not in self._templates:
            raise ValueError(f'No templates for interface language {uilang}')
        if template_name not in self._templates[uilang]:
            raise ValueError(f'Unknown template {template_name} for {uilang}')
        return self._templates[uilang][template_name]
